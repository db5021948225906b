"""
Decimal helpers for currency arithmetic.

All ledger, strategy and result math runs on decimal.Decimal with half-up rounding.
Floats are converted through repr() so 0.1 becomes Decimal("0.1"), not its binary expansion.
"""

from __future__ import annotations

from decimal import Decimal, Context, ROUND_HALF_UP, ROUND_UP, ROUND_DOWN
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
CENT = Decimal("0.01")
BASIS = Decimal("0.0001")

# 10 significant digits, half-up (pricing model boundary)
PRICE_CONTEXT = Context(prec=10, rounding=ROUND_HALF_UP)


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a currency amount")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def quantize(value: Number, step: Decimal = CENT) -> Decimal:
    return to_decimal(value).quantize(step, rounding=ROUND_HALF_UP)


def quantize_up(value: Number, step: Decimal = CENT) -> Decimal:
    return to_decimal(value).quantize(step, rounding=ROUND_UP)


def round_significant(value: Number) -> Decimal:
    """Round to 10 significant digits, half-up."""
    return PRICE_CONTEXT.plus(to_decimal(value))


def floor_div(numerator: Number, denominator: Number) -> int:
    """floor(numerator / denominator) for non-negative amounts; 0 if the denominator is not positive."""
    den = to_decimal(denominator)
    if den <= 0:
        return 0
    return int((to_decimal(numerator) / den).to_integral_value(rounding=ROUND_DOWN))


def percent(part: Number, whole: Number) -> Decimal:
    """part / whole rounded to 4 decimals half-up, then x100. 0 when whole is 0."""
    w = to_decimal(whole)
    if w == 0:
        return ZERO
    return (to_decimal(part) / w).quantize(BASIS, rounding=ROUND_HALF_UP) * 100
