from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class MenuItem(models.Model):
    """
    A dish offered on the weekly menu.

    `code` is the stable public identifier used by the storefront and the
    cart (for example "m-med-chicken"); `woo_product_id` maps the dish onto
    its WooCommerce product and is optional, unmapped items are sold locally
    but never mirrored to the remote cart.
    """

    code = models.SlugField(
        max_length=64,
        unique=True,
        help_text=_("Stable public identifier, e.g. 'm-med-chicken'."),
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    tags = models.JSONField(default=list, blank=True)
    calories = models.PositiveIntegerField(null=True, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    is_popular = models.BooleanField(default=False)
    woo_product_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("WooCommerce product id. Leave blank to keep the item out of remote carts."),
    )
    customization_options = models.JSONField(
        default=dict,
        blank=True,
        help_text=_(
            "Allowed choices: bases, sauces, proteins, swaps, dislikes (lists of strings) "
            "and has_vegetarian_option ({label, instructions})."
        ),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Menu Item")
        verbose_name_plural = _("Menu Items")

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def is_remote_mapped(self):
        return self.woo_product_id is not None

    @property
    def vegetarian_option(self):
        return self.customization_options.get("has_vegetarian_option") or None

    def validate_customization(self, customization):
        """
        Check a customization against this item's allowed choices.

        Fields the item does not declare options for are accepted as free
        text. `avoid` may list several dislikes separated by commas.

        Raises:
            ValidationError: with one message per rejected field
        """
        options = self.customization_options or {}
        errors = {}

        for field, option_key in (
            ("base", "bases"),
            ("sauce", "sauces"),
            ("protein", "proteins"),
            ("swap", "swaps"),
        ):
            value = getattr(customization, field)
            allowed = options.get(option_key)
            if value is not None and allowed and value not in allowed:
                errors[field] = f"'{value}' is not an available {field} for {self.name}."

        if customization.avoid is not None and options.get("dislikes"):
            unknown = [
                part.strip()
                for part in customization.avoid.split(",")
                if part.strip() and part.strip() not in options["dislikes"]
            ]
            if unknown:
                errors["avoid"] = f"Unknown exclusions for {self.name}: {', '.join(unknown)}."

        if customization.is_vegetarian and not self.vegetarian_option:
            errors["is_vegetarian"] = f"{self.name} has no vegetarian option."

        if errors:
            raise ValidationError(errors)


class DayMenuEntry(models.Model):
    """Places a menu item on a weekday's menu, under a category heading."""

    class Weekday(models.IntegerChoices):
        MONDAY = 0, _("Monday")
        TUESDAY = 1, _("Tuesday")
        WEDNESDAY = 2, _("Wednesday")
        THURSDAY = 3, _("Thursday")
        FRIDAY = 4, _("Friday")
        SATURDAY = 5, _("Saturday")
        SUNDAY = 6, _("Sunday")

    weekday = models.PositiveSmallIntegerField(choices=Weekday.choices)
    category_name = models.CharField(max_length=100, default="Daily Selection")
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="day_entries",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["weekday", "position", "id"]
        verbose_name = _("Day Menu Entry")
        verbose_name_plural = _("Day Menu Entries")
        constraints = [
            models.UniqueConstraint(
                fields=["weekday", "menu_item"],
                name="unique_menu_item_per_weekday",
            )
        ]

    def __str__(self):
        return f"{self.get_weekday_display()}: {self.menu_item.name}"
