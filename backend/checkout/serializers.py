"""
Checkout request/response serializers.
"""

from rest_framework import serializers

from .models import GuestProfile
from .services import CustomerInfo


class SummaryRequestSerializer(serializers.Serializer):
    """
    Request body format:
    {
        "tip_rate": "0.10",
        "coupon_code": "SAVE10"
    }
    """
    tip_rate = serializers.DecimalField(max_digits=4, decimal_places=2, required=False, allow_null=True)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True)


class CouponRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, trim_whitespace=True)


class PaymentIntentRequestSerializer(SummaryRequestSerializer):
    customer_email = serializers.EmailField(required=False, allow_blank=True)


class CustomerInfoSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    street = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    zip = serializers.CharField(max_length=10, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    @staticmethod
    def to_customer(data) -> CustomerInfo:
        data = dict(data)
        data['zip_code'] = data.pop('zip', '')
        return CustomerInfo(**data)


class CompleteOrderSerializer(SummaryRequestSerializer):
    """
    Request body format:
    {
        "customer": {"name": "Ana Perez", "email": "ana@example.com", "zip": "33101"},
        "coupon_code": "",
        "payment_intent_id": "pi_123"
    }
    """
    customer = CustomerInfoSerializer()
    payment_intent_id = serializers.CharField(max_length=255, required=False, allow_blank=True)


class GuestProfileSerializer(serializers.ModelSerializer):
    zip = serializers.CharField(source='zip_code', max_length=10)

    class Meta:
        model = GuestProfile
        fields = ['email', 'phone', 'zip', 'updated_at']
        read_only_fields = ['updated_at']
