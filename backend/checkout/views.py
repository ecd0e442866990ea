"""
Checkout API views.

All endpoints act on the cart of the current guest session.
"""

import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.services import CartService, CartSessionService

from .exceptions import CheckoutError, InvalidCouponError
from .serializers import (
    CompleteOrderSerializer,
    CouponRequestSerializer,
    CustomerInfoSerializer,
    GuestProfileSerializer,
    PaymentIntentRequestSerializer,
    SummaryRequestSerializer,
)
from .services import (
    CheckoutService,
    CouponService,
    GuestProfileService,
    OrderCompletionService,
    PaymentService,
)

logger = logging.getLogger(__name__)


def error_response(exc: CheckoutError):
    return Response({"error": str(exc)}, status=exc.status_code)


class GuestCartMixin:
    """Resolves the session's guest id and cart."""

    def get_guest_id(self, request):
        return CartSessionService.get_or_create_guest_id(request)

    def get_cart(self, request):
        return CartService.get_or_create_cart(self.get_guest_id(request))


class CheckoutHandoffView(GuestCartMixin, APIView):
    """Rebuild the WooCommerce cart and return the checkout URL"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        """
        POST /api/checkout/handoff/

        200 {"checkout_url": ..., "synced": n, "skipped": n}
        409 while another handoff for this cart is running
        503 when the remote cart could not be rebuilt (no URL is returned)
        """
        cart = self.get_cart(request)
        try:
            handoff = CheckoutService().prepare_handoff(cart)
        except CheckoutError as e:
            return error_response(e)
        return Response(handoff)


class OrderSummaryView(GuestCartMixin, APIView):
    """Subtotal, discount, tax, tip and total for the current cart"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SummaryRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = self.get_cart(request)
        try:
            summary = CheckoutService().summarize(
                cart,
                tip_rate=serializer.validated_data.get('tip_rate'),
                coupon_code=serializer.validated_data.get('coupon_code'),
            )
        except CheckoutError as e:
            return error_response(e)
        return Response(summary.as_dict())


class ValidateCouponView(APIView):
    """Check a coupon code"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        """
        POST /api/checkout/validate-coupon/

        Unknown, expired and used-up coupons answer 200 with valid=false and
        the reason; only a missing code is a 400.
        """
        serializer = CouponRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"valid": False, "error": "Coupon code is required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            coupon = CouponService.validate(serializer.validated_data['code'])
        except InvalidCouponError as e:
            return Response({"valid": False, "error": str(e)})

        return Response({
            "valid": True,
            "code": coupon.code,
            "discount_type": coupon.discount_type,
            "discount_value": str(coupon.amount),
            "is_free": coupon.is_free,
        })


class PaymentIntentView(GuestCartMixin, APIView):
    """Create a Stripe PaymentIntent for the cart's server-side total"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = PaymentIntentRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart = self.get_cart(request)
        try:
            summary = CheckoutService().summarize(
                cart,
                tip_rate=data.get('tip_rate'),
                coupon_code=data.get('coupon_code'),
            )
            intent = PaymentService.create_payment_intent(
                summary,
                customer_email=data.get('customer_email') or None,
                cart=cart,
            )
        except CheckoutError as e:
            return error_response(e)

        return Response({**intent, 'summary': summary.as_dict()})


class CompleteOrderView(GuestCartMixin, APIView):
    """Create the WooCommerce orders for a paid (or free) cart"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        """
        POST /api/checkout/complete/

        One order per cart line. Lines whose order could not be created
        come back with a local reference and an error instead of failing
        the request. The cart is cleared afterwards.
        """
        serializer = CompleteOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart = self.get_cart(request)
        coupon_code = data.get('coupon_code')
        try:
            coupon = CouponService.validate(coupon_code) if coupon_code else None
            customer = CustomerInfoSerializer.to_customer(data['customer'])
            result = OrderCompletionService().complete(
                cart,
                customer,
                coupon=coupon,
                payment_intent_id=data.get('payment_intent_id') or None,
            )
        except CheckoutError as e:
            return error_response(e)

        return Response(result)


class GuestProfileView(GuestCartMixin, APIView):
    """Read, register or forget the session's guest profile"""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        profile = GuestProfileService.get(self.get_guest_id(request))
        if profile is None:
            return Response({"registered": False, "profile": None})
        return Response({"registered": True, "profile": GuestProfileSerializer(profile).data})

    def post(self, request):
        serializer = GuestProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        profile = GuestProfileService.register(
            self.get_guest_id(request),
            email=serializer.validated_data['email'],
            phone=serializer.validated_data['phone'],
            zip_code=serializer.validated_data['zip_code'],
        )
        return Response(
            {"registered": True, "profile": GuestProfileSerializer(profile).data},
            status=status.HTTP_201_CREATED
        )

    def delete(self, request):
        GuestProfileService.forget(self.get_guest_id(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
