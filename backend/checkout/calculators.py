"""
Order summary math.

    subtotal  = cart total (live menu prices)
    discount  = coupon discount on the subtotal
    tax       = STOREFRONT_TAX_RATE × (subtotal - discount)
    tip       = tip rate × subtotal
    total     = subtotal - discount + tax + tip

A free coupon (100% off, no payment) zeroes the whole order, tip included.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.conf import settings

from .exceptions import InvalidTipError
from .money import ZERO, apply_rate, quantize, to_decimal, to_minor


@dataclass(frozen=True)
class CouponDiscount:
    """A validated coupon."""

    PERCENT = 'percent'
    FIXED_CART = 'fixed_cart'

    code: str
    discount_type: str
    amount: Decimal
    is_free: bool = False

    def discount_on(self, subtotal: Decimal, currency: str) -> Decimal:
        """Discount for a subtotal, never more than the subtotal itself."""
        if self.is_free:
            return subtotal
        if self.discount_type == self.PERCENT:
            percent = min(max(self.amount, ZERO), Decimal('100'))
            discount = apply_rate(currency, subtotal, percent / Decimal('100'))
        else:
            discount = quantize(currency, max(self.amount, ZERO))
        return min(discount, subtotal)


@dataclass(frozen=True)
class OrderSummary:
    currency: str
    subtotal: Decimal
    discount: Decimal
    tax_rate: Decimal
    tax: Decimal
    tip_rate: Decimal
    tip: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    is_free: bool = False

    @property
    def total_minor(self) -> int:
        return to_minor(self.currency, self.total)

    @property
    def requires_payment(self) -> bool:
        return not self.is_free and self.total > ZERO

    def as_dict(self):
        return {
            'currency': self.currency,
            'subtotal': str(self.subtotal),
            'discount': str(self.discount),
            'tax_rate': str(self.tax_rate),
            'tax': str(self.tax),
            'tip_rate': str(self.tip_rate),
            'tip': str(self.tip),
            'total': str(self.total),
            'total_minor': self.total_minor,
            'coupon_code': self.coupon_code,
            'is_free': self.is_free,
            'requires_payment': self.requires_payment,
        }


def tip_options() -> List[Decimal]:
    return [to_decimal(rate) for rate in settings.STOREFRONT_TIP_OPTIONS]


def default_tip_rate() -> Decimal:
    return to_decimal(settings.STOREFRONT_DEFAULT_TIP)


def resolve_tip_rate(tip_rate=None) -> Decimal:
    """
    The requested tip rate, or STOREFRONT_DEFAULT_TIP when none is given.

    Raises:
        InvalidTipError: if the rate is not one of STOREFRONT_TIP_OPTIONS
    """
    if tip_rate is None or tip_rate == '':
        return default_tip_rate()
    try:
        rate = to_decimal(tip_rate)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidTipError(tip_rate)
    if rate not in tip_options():
        raise InvalidTipError(tip_rate)
    return rate


def calculate_order_summary(
    subtotal,
    tip_rate=None,
    coupon: Optional[CouponDiscount] = None,
    currency: Optional[str] = None,
) -> OrderSummary:
    currency = (currency or settings.STRIPE_CURRENCY).upper()
    subtotal = quantize(currency, subtotal)
    tax_rate = to_decimal(settings.STOREFRONT_TAX_RATE)
    rate = resolve_tip_rate(tip_rate)
    is_free = bool(coupon and coupon.is_free)

    discount = coupon.discount_on(subtotal, currency) if coupon else quantize(currency, ZERO)
    taxable = subtotal - discount
    tax = apply_rate(currency, taxable, tax_rate)
    tip = quantize(currency, ZERO) if is_free else apply_rate(currency, subtotal, rate)
    total = quantize(currency, taxable + tax + tip)

    return OrderSummary(
        currency=currency,
        subtotal=subtotal,
        discount=discount,
        tax_rate=tax_rate,
        tax=tax,
        tip_rate=rate,
        tip=tip,
        total=total,
        coupon_code=coupon.code if coupon else None,
        is_free=is_free,
    )
