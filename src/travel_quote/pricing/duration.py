"""Trip-duration coefficient curve."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from travel_quote.core.money import ONE, ZERO, to_coefficient
from travel_quote.reference.provider import ReferenceDataProvider


def weighted_days(reference: ReferenceDataProvider, days: int, on: date) -> Decimal:
    """Day count weighted by the duration curve, ``days × coefficient``.

    The bracket table alone would let a trip one day into a cheaper bracket
    cost less in total than the last day of the previous one
    (30 × 0.95 = 28.50 but 31 × 0.90 = 27.90). The weighted count is
    therefore never below the weighted count at the end of any shorter
    bracket. Days outside every bracket weigh ``1.0``.
    """
    current = reference.find_duration_coefficient(days, on)
    coefficient = current.coefficient if current is not None else ONE

    floor = ZERO
    for bracket in reference.duration_brackets(on):
        if bracket.days_to >= days:
            break
        floor = max(floor, bracket.days_to * bracket.coefficient)

    return max(days * coefficient, floor)


def duration_coefficient(reference: ReferenceDataProvider, days: int, on: date) -> Decimal:
    """Effective per-day coefficient, rounded to 4 places for reporting."""
    if days <= 0:
        return to_coefficient(ONE)
    return to_coefficient(weighted_days(reference, days, on) / days)
