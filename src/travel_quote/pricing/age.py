"""Age coefficient lookup with a built-in fallback table."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import NamedTuple

from loguru import logger

from travel_quote.reference.provider import ReferenceDataProvider


class AgeFactor(NamedTuple):
    coefficient: Decimal
    description: str


# (age_from, age_to, coefficient, description); used only when the
# reference table has no bracket for the age.
_FALLBACK_BRACKETS: tuple[tuple[int, int, str, str], ...] = (
    (0, 5, "1.1", "Infants and toddlers"),
    (6, 17, "0.9", "Children and teenagers"),
    (18, 30, "1.0", "Young adults"),
    (31, 40, "1.1", "Adults"),
    (41, 50, "1.3", "Middle-aged"),
    (51, 60, "1.6", "Senior"),
    (61, 70, "2.0", "Elderly"),
    (71, 80, "2.5", "Very elderly"),
)

_DISABLED = AgeFactor(Decimal("1.0"), "Age coefficient disabled")


def resolve_age_factor(
    reference: ReferenceDataProvider, age: int, on: date, *, enabled: bool = True
) -> AgeFactor:
    """Coefficient and age-group description for *age* on date *on*.

    Returns ``1.0`` when *enabled* is false. Otherwise the reference table
    is consulted first and the built-in brackets are the fallback.

    Raises
    ------
    ValueError
        If *age* is outside every known bracket.
    """
    if not enabled:
        return _DISABLED

    row = reference.find_age_coefficient(age, on)
    if row is not None:
        return AgeFactor(row.coefficient, row.description or _fallback_description(age))

    for age_from, age_to, coefficient, description in _FALLBACK_BRACKETS:
        if age_from <= age <= age_to:
            logger.warning(
                "No age coefficient in reference data for age {age}, using default {c}",
                age=age,
                c=coefficient,
            )
            return AgeFactor(Decimal(coefficient), description)

    raise ValueError(f"No age coefficient for age {age}")


def _fallback_description(age: int) -> str:
    for age_from, age_to, _, description in _FALLBACK_BRACKETS:
        if age_from <= age <= age_to:
            return description
    return "Unknown"
