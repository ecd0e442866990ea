"""
Customization value type.

A Customization is the set of choices a shopper made for one dish. Two
selections of the same dish on the same date belong on the same cart line
exactly when their customizations are equal, so the type normalizes its
fields on construction and compares by the normalized values:

    Customization(base=" Rice ") == Customization.from_payload({"base": "Rice", "sauce": ""})

`canonical_key()` is the same identity as a string, stored on each cart
line so the database can do the merge lookup.
"""

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import InvalidCustomizationError

TEXT_FIELDS = ('base', 'sauce', 'protein', 'veg_instructions', 'swap', 'avoid')

# Storefront payloads arrive in camelCase
PAYLOAD_ALIASES = {
    'isVegetarian': 'is_vegetarian',
    'vegInstructions': 'veg_instructions',
}

# Order of the human-readable pairs sent with remote cart items and orders
ITEM_DATA_LABELS = (
    ('base', 'Base'),
    ('sauce', 'Sauce'),
    ('protein', 'Protein'),
    ('is_vegetarian', 'Vegetarian'),
    ('veg_instructions', 'Vegetarian instructions'),
    ('avoid', 'Avoid'),
    ('swap', 'Swap'),
)

SERVICE_DATE_LABEL = 'Service Date'


@dataclass(frozen=True)
class Customization:
    base: Optional[str] = None
    sauce: Optional[str] = None
    protein: Optional[str] = None
    is_vegetarian: bool = False
    veg_instructions: Optional[str] = None
    swap: Optional[str] = None
    avoid: Optional[str] = None

    def __post_init__(self):
        for name in TEXT_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise InvalidCustomizationError(
                    f"Customization field '{name}' must be a string",
                    errors={name: 'Expected a string.'},
                )
            object.__setattr__(self, name, value.strip() or None)

        if not isinstance(self.is_vegetarian, bool):
            raise InvalidCustomizationError(
                "Customization field 'is_vegetarian' must be a boolean",
                errors={'is_vegetarian': 'Expected a boolean.'},
            )

        # Instructions only mean something for the vegetarian variant
        if not self.is_vegetarian:
            object.__setattr__(self, 'veg_instructions', None)

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> 'Customization':
        """
        Build a customization from request data or a stored JSON dict.

        None and empty dicts give the empty customization. Unknown keys are
        rejected rather than silently dropped.
        """
        if not payload:
            return cls()
        if not isinstance(payload, Mapping):
            raise InvalidCustomizationError("Customization must be an object")

        known = {f.name for f in fields(cls)}
        values = {}
        unknown = []
        for key, value in payload.items():
            name = PAYLOAD_ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            if name == 'is_vegetarian' and value is None:
                value = False
            values[name] = value

        if unknown:
            raise InvalidCustomizationError(
                f"Unknown customization fields: {', '.join(sorted(unknown))}",
                errors={key: 'Unknown field.' for key in unknown},
            )

        return cls(**values)

    def as_dict(self) -> Dict[str, Any]:
        """Present fields only; the vegetarian flag is present only when set."""
        data = {}
        for name, value in asdict(self).items():
            if name == 'is_vegetarian':
                if value:
                    data[name] = True
            elif value is not None:
                data[name] = value
        return data

    def is_empty(self) -> bool:
        return not self.as_dict()

    def canonical_key(self) -> str:
        data = self.as_dict()
        if not data:
            return ''
        return json.dumps(data, sort_keys=True, separators=(',', ':'), ensure_ascii=False)

    def to_item_data(self, service_date_label: Optional[str] = None) -> List[Dict[str, str]]:
        """
        Flatten into labelled pairs for the remote cart and order meta.

        The service date, when given, always comes first.
        """
        pairs = []
        if service_date_label:
            pairs.append({'key': SERVICE_DATE_LABEL, 'value': service_date_label})

        data = self.as_dict()
        for name, label in ITEM_DATA_LABELS:
            if name not in data:
                continue
            value = 'Yes' if name == 'is_vegetarian' else data[name]
            pairs.append({'key': label, 'value': value})
        return pairs
