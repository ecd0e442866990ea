"""
Order window configuration.

The window is described by settings.ORDER_WINDOW and validated once, when
the availability app loads, so a bad cutoff hour or an empty service
calendar stops the process at startup instead of surfacing per request.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import pytz
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


DEFAULTS: Dict[str, Any] = {
    'TIMEZONE': 'America/New_York',
    'CUTOFF_HOUR': 10,
    'SERVICE_WEEKDAYS': (0, 1, 2, 3, 4),
    'CALENDAR_HORIZON_DAYS': 30,
    'PREVIEW_ORDERABLE': False,
}


@dataclass(frozen=True)
class OrderWindowConfig:
    timezone: str
    cutoff_hour: int
    service_weekdays: Tuple[int, ...]
    calendar_horizon_days: int
    preview_orderable: bool

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> 'OrderWindowConfig':
        """
        Build a validated config from an ORDER_WINDOW style dict.

        Raises:
            ImproperlyConfigured: on any invalid value
        """
        values = dict(DEFAULTS)
        values.update(raw or {})

        unknown = set(values) - set(DEFAULTS)
        if unknown:
            raise ImproperlyConfigured(
                f"ORDER_WINDOW has unknown keys: {', '.join(sorted(unknown))}"
            )

        tz_name = values['TIMEZONE']
        try:
            pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            raise ImproperlyConfigured(f"ORDER_WINDOW['TIMEZONE'] is not a known timezone: {tz_name!r}")

        cutoff_hour = values['CUTOFF_HOUR']
        if not _is_int(cutoff_hour) or not 0 <= cutoff_hour <= 23:
            raise ImproperlyConfigured(
                f"ORDER_WINDOW['CUTOFF_HOUR'] must be an integer between 0 and 23, got {cutoff_hour!r}"
            )

        weekdays = values['SERVICE_WEEKDAYS']
        try:
            weekdays = tuple(sorted(set(weekdays)))
        except TypeError:
            raise ImproperlyConfigured("ORDER_WINDOW['SERVICE_WEEKDAYS'] must be a list of weekday numbers")
        if not weekdays:
            # An empty calendar would make the next-open-day search unbounded
            raise ImproperlyConfigured("ORDER_WINDOW['SERVICE_WEEKDAYS'] must contain at least one weekday")
        if any(not _is_int(day) or not 0 <= day <= 6 for day in weekdays):
            raise ImproperlyConfigured(
                f"ORDER_WINDOW['SERVICE_WEEKDAYS'] entries must be 0 (Monday) to 6 (Sunday), got {weekdays!r}"
            )

        horizon = values['CALENDAR_HORIZON_DAYS']
        if not _is_int(horizon) or horizon <= 0:
            raise ImproperlyConfigured(
                f"ORDER_WINDOW['CALENDAR_HORIZON_DAYS'] must be a positive integer, got {horizon!r}"
            )

        preview_orderable = values['PREVIEW_ORDERABLE']
        if not isinstance(preview_orderable, bool):
            raise ImproperlyConfigured("ORDER_WINDOW['PREVIEW_ORDERABLE'] must be a boolean")

        return cls(
            timezone=tz_name,
            cutoff_hour=cutoff_hour,
            service_weekdays=weekdays,
            calendar_horizon_days=horizon,
            preview_orderable=preview_orderable,
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_config: Optional[OrderWindowConfig] = None


def get_order_window_config() -> OrderWindowConfig:
    """Return the process-wide order window, loading it on first use."""
    global _config
    if _config is None:
        _config = OrderWindowConfig.from_dict(getattr(settings, 'ORDER_WINDOW', None))
    return _config


def reset_order_window_config() -> None:
    global _config
    _config = None
