"""
Cart serializers for API representation.

These serializers handle the conversion between Cart models and JSON
for the customer-facing API.
"""

from rest_framework import serializers

from availability.services import AvailabilityService
from menu.models import MenuItem

from .customization import Customization
from .exceptions import InvalidCustomizationError
from .models import Cart, CartItem


class CartItemSerializer(serializers.ModelSerializer):
    """
    Serializer for cart lines.
    Prices come from the live menu item (no snapshot).
    """
    menu_item_code = serializers.CharField(source='menu_item.code', read_only=True)
    name = serializers.CharField(source='menu_item.name', read_only=True)
    image_url = serializers.CharField(source='menu_item.image_url', read_only=True)
    price = serializers.DecimalField(
        source='menu_item.price',
        max_digits=10,
        decimal_places=2,
        read_only=True
    )
    service_date_label = serializers.SerializerMethodField()
    item_data = serializers.SerializerMethodField()
    total_price = serializers.SerializerMethodField()
    is_remote_mapped = serializers.BooleanField(source='menu_item.is_remote_mapped', read_only=True)

    class Meta:
        model = CartItem
        fields = [
            'id',
            'menu_item_code',
            'name',
            'image_url',
            'price',
            'service_date',
            'service_date_label',
            'customization',
            'item_data',
            'quantity',
            'total_price',
            'remote_item_key',
            'is_remote_mapped',
            'added_at',
        ]
        read_only_fields = fields

    def get_service_date_label(self, obj):
        return AvailabilityService.display_date(obj.service_date)

    def get_item_data(self, obj):
        return obj.get_customization().to_item_data()

    def get_total_price(self, obj):
        return str(obj.get_total_price())


class CartSerializer(serializers.ModelSerializer):
    """
    Serializer for the cart with its derived totals.

    The shopper notice is resolved by CartService (expired notices are
    cleared on read) and handed in through the serializer context.
    """
    items = serializers.SerializerMethodField()
    total = serializers.SerializerMethodField()
    item_count = serializers.SerializerMethodField()
    notice = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = [
            'id',
            'items',
            'total',
            'item_count',
            'is_syncing',
            'last_synced_at',
            'notice',
            'updated_at',
        ]
        read_only_fields = fields

    def _totals(self, obj):
        if not hasattr(self, '_cached_totals'):
            self._cached_totals = {}
        if obj.pk not in self._cached_totals:
            self._cached_totals[obj.pk] = obj.get_totals()
        return self._cached_totals[obj.pk]

    def get_items(self, obj):
        lines = obj.items.select_related('menu_item').order_by('position', 'added_at')
        return CartItemSerializer(lines, many=True).data

    def get_total(self, obj):
        return str(self._totals(obj)['total'])

    def get_item_count(self, obj):
        return self._totals(obj)['item_count']

    def get_notice(self, obj):
        return self.context.get('notice', '') or None


class CustomizationField(serializers.JSONField):
    """Parses a customization object into a Customization value."""

    def to_internal_value(self, data):
        data = super().to_internal_value(data)
        try:
            return Customization.from_payload(data)
        except InvalidCustomizationError as e:
            raise serializers.ValidationError(e.errors or str(e))


class AddToCartSerializer(serializers.Serializer):
    """
    Serializer for adding a dish to the cart.

    Request body format:
    {
        "menu_item_code": "m-med-chicken",
        "service_date": "2024-03-04",
        "customization": {"base": "Brown rice", "isVegetarian": false}
    }
    """
    menu_item_code = serializers.CharField(max_length=64)
    service_date = serializers.DateField()
    customization = CustomizationField(required=False)

    def validate_menu_item_code(self, value):
        """Resolve the code to an active menu item."""
        try:
            return MenuItem.objects.get(code=value, is_active=True)
        except MenuItem.DoesNotExist:
            raise serializers.ValidationError("Menu item not found")

    def validate(self, attrs):
        attrs.setdefault('customization', Customization())
        return attrs


class UpdateCartItemSerializer(serializers.Serializer):
    """
    Serializer for changing a line's quantity by a delta.

    Request body format:
    {
        "delta": -1
    }
    """
    delta = serializers.IntegerField(required=True)

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("delta must not be 0")
        return value
