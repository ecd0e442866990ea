from rest_framework import serializers

from .models import MenuItem


class MenuItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = [
            "code",
            "name",
            "description",
            "price",
            "tags",
            "calories",
            "image_url",
            "is_popular",
            "woo_product_id",
            "customization_options",
        ]


class MenuCategorySerializer(serializers.Serializer):
    name = serializers.CharField()
    items = MenuItemSerializer(many=True)


class DayMenuSerializer(serializers.Serializer):
    weekday = serializers.CharField()
    categories = MenuCategorySerializer(many=True)


class MenuQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
