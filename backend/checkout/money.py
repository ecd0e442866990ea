"""
Monetary precision helpers for checkout totals.

All amounts are Decimal and quantized with ROUND_HALF_EVEN (banker's
rounding) before they are shown, charged or converted to minor units.
Stripe takes integer minor units (cents), so conversion always goes
through quantize() first.
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "CAD": 2,
    "JPY": 0,
    "KRW": 0,
}

ZERO = Decimal("0")


def currency_exponent(currency: str) -> int:
    """
    Get the number of decimal places for a currency.

    Examples:
        >>> currency_exponent("usd")
        2
        >>> currency_exponent("JPY")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    return Decimal(10) ** -currency_exponent(currency)


def to_decimal(amount: Union[Decimal, str, int, float]) -> Decimal:
    if isinstance(amount, float):
        # Go through str so 0.1 stays 0.1
        amount = str(amount)
    return Decimal(amount)


def quantize(currency: str, amount: Union[Decimal, str, int, float]) -> Decimal:
    """
    Round to currency decimals using banker's rounding.

    Examples:
        >>> quantize("USD", "10.125")
        Decimal('10.12')
        >>> quantize("USD", "10.135")
        Decimal('10.14')
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def apply_rate(currency: str, amount: Union[Decimal, str, int], rate: Union[Decimal, str, int, float]) -> Decimal:
    """
    amount × rate, rounded to the currency.

    Rates are fractions (0.02 for 2%), not percentages.
    """
    return quantize(currency, to_decimal(amount) * to_decimal(rate))


def to_minor(currency: str, amount: Union[Decimal, str, int, float]) -> int:
    """
    Convert to minor units (e.g., cents) after quantization.

    Examples:
        >>> to_minor("USD", "10.125")
        1012
        >>> to_minor("JPY", "1234.56")
        1235
    """
    quantized = quantize(currency, amount)
    exponent = currency_exponent(currency)
    return int((quantized * (10 ** exponent)).to_integral_value())
