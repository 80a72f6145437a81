"""Decimal rounding helpers: money to cents, coefficients to 4 places."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

_CENTS = Decimal("0.01")
_COEFFICIENT = Decimal("0.0001")


def to_money(value: Decimal | int | str) -> Decimal:
    """Round to exactly 2 fractional digits, half-up."""
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def to_coefficient(value: Decimal | int | str) -> Decimal:
    """Round to 4 fractional digits, half-up."""
    return Decimal(value).quantize(_COEFFICIENT, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """``amount × percentage / 100`` rounded to cents."""
    return to_money(amount * percentage / HUNDRED)
