"""
Checkout service layer.

This module handles:
- The WooCommerce checkout handoff (full remote cart rebuild, then redirect)
- Order summaries (discount, tax, tip) computed server-side
- Coupon validation
- Stripe PaymentIntents and their verification
- Order completion: one WooCommerce order per cart line
- The guest profile used to prefill checkout
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import uuid

import pytz
import stripe
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from availability.services import AvailabilityService
from cart.models import Cart, CartItem
from cart.services import CartService
from cart.sync import RemoteCartSynchronizer
from woocommerce.clients import WooRestClient
from woocommerce.exceptions import WooCommerceError

from .calculators import CouponDiscount, OrderSummary, calculate_order_summary
from .exceptions import (
    EmptyCartError,
    HandoffFailedError,
    InvalidCouponError,
    NothingToChargeError,
    PaymentConfigurationError,
    PaymentNotConfirmedError,
    PaymentProviderError,
    SyncInProgressError,
)
from .models import GuestProfile
from .money import to_decimal

logger = logging.getLogger(__name__)


class CheckoutService:
    """Handoff to the WooCommerce checkout and order summaries."""

    def __init__(self, synchronizer_class=RemoteCartSynchronizer):
        self.synchronizer_class = synchronizer_class

    @staticmethod
    def _require_lines(cart: Cart):
        if not cart.items.exists():
            raise EmptyCartError()

    def prepare_handoff(self, cart: Cart) -> Dict[str, Any]:
        """
        Rebuild the remote cart and return where to send the shopper.

        Raises:
            EmptyCartError: the cart has no lines
            SyncInProgressError: another resync of this cart is running
            HandoffFailedError: the remote cart could not be rebuilt, or
                WooCommerce checkout is not configured
        """
        self._require_lines(cart)

        checkout_url = settings.WOOCOMMERCE_CHECKOUT_URL
        if not checkout_url:
            raise HandoffFailedError("Online checkout is not available right now")

        synchronizer = self.synchronizer_class(cart)
        if synchronizer.enabled and not synchronizer.acquire_sync():
            logger.info(f"Handoff refused for cart {cart.id}: resync already in flight")
            raise SyncInProgressError()

        result = synchronizer.full_resync()
        if result.in_progress:
            raise SyncInProgressError()
        if not result.enabled:
            raise HandoffFailedError("Online checkout is not available right now", result=result)
        if not result.ok:
            logger.error(f"Checkout handoff failed for cart {cart.id}: {result.error}")
            raise HandoffFailedError(result=result)

        logger.info(f"Cart {cart.id} handed off to WooCommerce checkout ({result.synced} lines)")
        return {
            'checkout_url': checkout_url,
            'synced': result.synced,
            'skipped': result.skipped,
        }

    def summarize(self, cart: Cart, tip_rate=None, coupon_code: Optional[str] = None) -> OrderSummary:
        """
        Order summary for the cart's current lines.

        Raises:
            EmptyCartError: the cart has no lines
            InvalidCouponError: the coupon code was rejected
            InvalidTipError: the tip rate is not offered
        """
        self._require_lines(cart)
        coupon = CouponService.validate(coupon_code) if coupon_code else None
        return calculate_order_summary(cart.get_totals()['total'], tip_rate=tip_rate, coupon=coupon)


class CouponService:
    """Validates coupon codes (free promo codes and WooCommerce coupons)."""

    @staticmethod
    def normalize(code: Optional[str]) -> str:
        return (code or '').strip().upper()

    @staticmethod
    def _parse_expiry(coupon: Dict[str, Any]):
        raw = coupon.get('date_expires_gmt') or coupon.get('date_expires')
        if not raw:
            return None
        expires = parse_datetime(raw)
        if expires is not None and timezone.is_naive(expires):
            expires = timezone.make_aware(expires, pytz.utc)
        return expires

    @staticmethod
    def validate(code: Optional[str], client: Optional[WooRestClient] = None, now=None) -> CouponDiscount:
        """
        Resolve a code to a CouponDiscount.

        Codes in STOREFRONT_FREE_COUPON_CODES are always valid, 100% off and
        skip payment. Anything else must exist in WooCommerce, be unexpired
        and have uses left.

        Raises:
            InvalidCouponError: with the message shown to the shopper
        """
        code = CouponService.normalize(code)
        if not code:
            raise InvalidCouponError("Coupon code is required")

        if code in settings.STOREFRONT_FREE_COUPON_CODES:
            return CouponDiscount(code=code, discount_type=CouponDiscount.PERCENT, amount=Decimal('100'), is_free=True)

        client = client or WooRestClient.from_settings()
        if not client.is_configured:
            raise InvalidCouponError("Coupon not found")

        try:
            coupon = client.find_coupon(code)
        except WooCommerceError as e:
            logger.warning(f"Coupon lookup for {code} failed: {e}")
            raise InvalidCouponError("Could not validate coupon")

        if coupon is None:
            raise InvalidCouponError("Coupon not found")

        expires = CouponService._parse_expiry(coupon)
        if expires is not None and expires < (now or timezone.now()):
            raise InvalidCouponError("This coupon has expired")

        usage_limit = coupon.get('usage_limit')
        if usage_limit and (coupon.get('usage_count') or 0) >= usage_limit:
            raise InvalidCouponError("This coupon has reached its usage limit")

        try:
            amount = to_decimal(coupon.get('amount') or '0')
        except ArithmeticError:
            amount = Decimal('0')

        discount_type = coupon.get('discount_type')
        if discount_type != CouponDiscount.PERCENT:
            discount_type = CouponDiscount.FIXED_CART

        return CouponDiscount(code=code, discount_type=discount_type, amount=amount)


class PaymentService:
    """Stripe PaymentIntents for storefront orders."""

    @staticmethod
    def _configure():
        if not settings.STRIPE_SECRET_KEY:
            raise PaymentConfigurationError()
        stripe.api_key = settings.STRIPE_SECRET_KEY

    @staticmethod
    def create_payment_intent(summary: OrderSummary, customer_email: Optional[str] = None, cart: Optional[Cart] = None) -> Dict[str, Any]:
        """
        Create a PaymentIntent for the summary total.

        The amount always comes from a server-side summary, never from the
        client.

        Raises:
            NothingToChargeError: free orders and zero totals
            PaymentConfigurationError: Stripe is not configured
            PaymentProviderError: Stripe rejected the request
        """
        if not summary.requires_payment:
            raise NothingToChargeError()

        PaymentService._configure()

        intent_data = {
            'amount': summary.total_minor,
            'currency': summary.currency.lower(),
            'automatic_payment_methods': {'enabled': True},
            'metadata': {
                'source': 'storefront',
                'coupon_code': summary.coupon_code or '',
            },
        }
        if cart is not None:
            intent_data['metadata']['cart_id'] = str(cart.id)
        if customer_email:
            intent_data['receipt_email'] = customer_email

        try:
            intent = stripe.PaymentIntent.create(**intent_data)
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent creation failed: {e}")
            raise PaymentProviderError(e.user_message) from e

        logger.info(f"Created PaymentIntent {intent.id} for {summary.total} {summary.currency}")
        return {
            'client_secret': intent.client_secret,
            'payment_intent_id': intent.id,
            'amount': summary.total_minor,
            'currency': summary.currency.lower(),
        }

    @staticmethod
    def verify_payment(payment_intent_id: Optional[str]):
        """
        Raises:
            PaymentNotConfirmedError: missing id, lookup failure, or a status
                other than "succeeded"
        """
        if not payment_intent_id:
            raise PaymentNotConfirmedError()

        PaymentService._configure()
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.warning(f"Could not verify PaymentIntent {payment_intent_id}: {e}")
            raise PaymentNotConfirmedError("Could not verify payment with Stripe") from e

        if intent.status != 'succeeded':
            raise PaymentNotConfirmedError(
                f"Payment not confirmed (status: {intent.status})",
                payment_status=intent.status,
            )
        return intent


@dataclass
class CustomerInfo:
    name: str
    email: str
    phone: str = ''
    street: str = ''
    city: str = ''
    zip_code: str = ''
    notes: str = ''

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ''

    @property
    def last_name(self) -> str:
        return ' '.join(self.name.split()[1:])

    def address(self) -> Dict[str, str]:
        return {
            'first_name': self.first_name,
            'last_name': self.last_name,
            'address_1': self.street,
            'city': self.city or settings.STOREFRONT_DEFAULT_CITY,
            'state': settings.STOREFRONT_DEFAULT_STATE,
            'postcode': self.zip_code,
            'country': settings.STOREFRONT_DEFAULT_COUNTRY,
        }


class OrderCompletionService:
    """
    Turns a paid (or free) cart into WooCommerce orders.

    Each cart line becomes its own order; all of them share the customer,
    the coupon and the payment intent. A line whose order cannot be created
    gets a local reference instead of failing the whole checkout.
    """

    def __init__(self, rest_client: Optional[WooRestClient] = None, cart_service: Optional[CartService] = None):
        self.rest_client = rest_client or WooRestClient.from_settings()
        self.cart_service = cart_service or CartService()

    @staticmethod
    def local_reference() -> str:
        return f"{settings.STOREFRONT_ORDER_PREFIX}-{uuid.uuid4().hex[:7].upper()}"

    @staticmethod
    def build_order_payload(
        line: CartItem,
        customer: CustomerInfo,
        coupon: Optional[CouponDiscount],
        payment_intent_id: Optional[str],
    ) -> Dict[str, Any]:
        is_free = bool(coupon and coupon.is_free)
        service_date_label = AvailabilityService.display_date(line.service_date)
        billing = customer.address()
        billing.update({'email': customer.email, 'phone': customer.phone})

        return {
            'status': 'processing',
            'set_paid': True,
            'payment_method': 'free_coupon' if is_free else 'stripe',
            'payment_method_title': 'Free (100% Promo)' if is_free else 'Credit Card (Stripe)',
            'billing': billing,
            'shipping': customer.address(),
            'line_items': [{
                'product_id': line.menu_item.woo_product_id,
                'quantity': line.quantity,
                'meta_data': line.get_customization().to_item_data(service_date_label),
            }],
            'coupon_lines': [{'code': coupon.code}] if coupon else [],
            'customer_note': customer.notes,
            'meta_data': [
                {'key': 'order_source', 'value': 'storefront-api'},
                {'key': 'service_date', 'value': line.service_date.isoformat()},
                {'key': 'stripe_payment_intent', 'value': payment_intent_id or 'N/A (free order)'},
            ],
        }

    def _create_line_order(self, line, customer, coupon, payment_intent_id) -> Dict[str, Any]:
        result = {
            'line_id': str(line.id),
            'item_name': line.menu_item.name,
            'service_date': line.service_date.isoformat(),
            'quantity': line.quantity,
            'order_id': None,
            'woo_order_id': None,
            'woo_order_key': None,
            'error': None,
        }

        if not self.rest_client.is_configured:
            result['error'] = "WooCommerce is not configured"
        elif line.menu_item.woo_product_id is None:
            result['error'] = "Menu item has no WooCommerce product"
        else:
            payload = self.build_order_payload(line, customer, coupon, payment_intent_id)
            try:
                order = self.rest_client.create_order(payload)
                result['woo_order_id'] = order.get('id')
                result['woo_order_key'] = order.get('order_key')
            except WooCommerceError as e:
                logger.error(f"WooCommerce order for {line.menu_item.name} ({line.service_date}) failed: {e}")
                result['error'] = str(e)

        if result['woo_order_id']:
            result['order_id'] = f"WC-{result['woo_order_id']}"
        else:
            result['order_id'] = self.local_reference()
        return result

    def complete(
        self,
        cart: Cart,
        customer: CustomerInfo,
        coupon: Optional[CouponDiscount] = None,
        payment_intent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Verify payment once, then create one order per cart line.

        Raises:
            EmptyCartError: the cart has no lines
            PaymentNotConfirmedError: a paid order without a succeeded intent
            PaymentConfigurationError: Stripe is not configured
        """
        lines: List[CartItem] = list(
            cart.items.select_related('menu_item').order_by('position', 'added_at')
        )
        if not lines:
            raise EmptyCartError("No items in order")

        is_free = bool(coupon and coupon.is_free)
        if not is_free:
            PaymentService.verify_payment(payment_intent_id)

        orders = [
            self._create_line_order(line, customer, coupon, payment_intent_id)
            for line in lines
        ]
        failed = sum(1 for order in orders if order['error'])
        logger.info(
            f"Completed checkout for cart {cart.id}: {len(orders) - failed} WooCommerce orders, "
            f"{failed} local references"
        )

        self.cart_service.clear(cart)
        return {'success': True, 'orders': orders}


class GuestProfileService:
    """The contact details a guest session registered with."""

    @staticmethod
    def get(session_id: str) -> Optional[GuestProfile]:
        return GuestProfile.objects.filter(session_id=session_id).first()

    @staticmethod
    def register(session_id: str, email: str, phone: str, zip_code: str) -> GuestProfile:
        profile, created = GuestProfile.objects.update_or_create(
            session_id=session_id,
            defaults={'email': email, 'phone': phone, 'zip_code': zip_code},
        )
        logger.info(f"{'Registered' if created else 'Updated'} guest profile for {session_id[:14]}")
        return profile

    @staticmethod
    def forget(session_id: str) -> bool:
        deleted, _ = GuestProfile.objects.filter(session_id=session_id).delete()
        return deleted > 0
