"""
Order Summary Tests

Money helpers and the discount / tax / tip math. Subtotal 28.80 is one
Bowl A (12.90) plus one Bowl B (15.90).
"""

from decimal import Decimal

import pytest

from checkout.calculators import CouponDiscount, calculate_order_summary, resolve_tip_rate
from checkout.exceptions import InvalidTipError
from checkout.money import apply_rate, quantize, to_minor

SUBTOTAL = Decimal('28.80')


class TestMoney:

    def test_bankers_rounding(self):
        assert quantize('USD', '10.125') == Decimal('10.12')
        assert quantize('USD', '10.135') == Decimal('10.14')

    def test_float_goes_through_str(self):
        assert quantize('USD', 0.1) == Decimal('0.10')

    def test_apply_rate(self):
        assert apply_rate('USD', '0.25', '0.02') == Decimal('0.00')
        assert apply_rate('USD', '0.75', '0.02') == Decimal('0.02')

    def test_minor_units(self):
        assert to_minor('USD', '32.26') == 3226
        assert to_minor('usd', '10.125') == 1012
        assert to_minor('JPY', '1234.56') == 1235


class TestOrderSummary:

    def test_default_tip(self):
        summary = calculate_order_summary(SUBTOTAL)

        assert summary.subtotal == Decimal('28.80')
        assert summary.discount == Decimal('0.00')
        assert summary.tax == Decimal('0.58')
        assert summary.tip_rate == Decimal('0.10')
        assert summary.tip == Decimal('2.88')
        assert summary.total == Decimal('32.26')
        assert summary.total_minor == 3226
        assert summary.requires_payment is True

    def test_no_tip(self):
        summary = calculate_order_summary(SUBTOTAL, tip_rate='0')

        assert summary.tip == Decimal('0.00')
        assert summary.total == Decimal('29.38')

    def test_percent_coupon_discounts_taxable_amount_not_tip(self):
        coupon = CouponDiscount(code='SAVE10', discount_type=CouponDiscount.PERCENT, amount=Decimal('10'))

        summary = calculate_order_summary(SUBTOTAL, tip_rate='0.10', coupon=coupon)

        assert summary.discount == Decimal('2.88')
        assert summary.tax == Decimal('0.52')
        assert summary.tip == Decimal('2.88')
        assert summary.total == Decimal('29.32')
        assert summary.coupon_code == 'SAVE10'

    def test_fixed_cart_coupon(self):
        coupon = CouponDiscount(code='FIVE', discount_type=CouponDiscount.FIXED_CART, amount=Decimal('5'))

        summary = calculate_order_summary(SUBTOTAL, tip_rate='0.10', coupon=coupon)

        assert summary.discount == Decimal('5.00')
        assert summary.tax == Decimal('0.48')
        assert summary.total == Decimal('27.16')

    def test_fixed_discount_capped_at_subtotal(self):
        coupon = CouponDiscount(code='BIG', discount_type=CouponDiscount.FIXED_CART, amount=Decimal('50'))

        summary = calculate_order_summary(SUBTOTAL, tip_rate='0', coupon=coupon)

        assert summary.discount == SUBTOTAL
        assert summary.total == Decimal('0.00')
        assert summary.requires_payment is False

    def test_free_coupon_zeroes_everything(self):
        coupon = CouponDiscount(code='REALFOOD113', discount_type=CouponDiscount.PERCENT, amount=Decimal('100'), is_free=True)

        summary = calculate_order_summary(SUBTOTAL, tip_rate='0.15', coupon=coupon)

        assert summary.tax == Decimal('0.00')
        assert summary.tip == Decimal('0.00')
        assert summary.total == Decimal('0.00')
        assert summary.is_free is True
        assert summary.requires_payment is False

    def test_tax_rate_from_settings(self, settings):
        settings.STOREFRONT_TAX_RATE = '0.07'

        summary = calculate_order_summary(Decimal('10.00'), tip_rate='0')

        assert summary.tax == Decimal('0.70')

    def test_as_dict_uses_strings(self):
        data = calculate_order_summary(SUBTOTAL).as_dict()

        assert data['total'] == '32.26'
        assert data['total_minor'] == 3226
        assert data['currency'] == 'USD'


class TestTipRate:

    @pytest.mark.parametrize('rate', ['0', '0.08', '0.10', '0.15', Decimal('0.1')])
    def test_offered_rates(self, rate):
        assert resolve_tip_rate(rate) == Decimal(str(rate))

    def test_default_when_missing(self):
        assert resolve_tip_rate(None) == Decimal('0.10')

    @pytest.mark.parametrize('rate', ['0.12', '-0.10', 'lots'])
    def test_rejected_rates(self, rate):
        with pytest.raises(InvalidTipError):
            resolve_tip_rate(rate)
