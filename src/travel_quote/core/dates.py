"""Date arithmetic used by validation, pricing, and underwriting."""

from __future__ import annotations

from datetime import date

MIN_TRIP_DAYS = 1


def age_on(birth_date: date, on: date) -> int:
    """Completed years between *birth_date* and *on*."""
    years = on.year - birth_date.year
    if (on.month, on.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def trip_days(start: date, end: date) -> int:
    """Priced day count for a trip.

    The count is ``end - start`` in calendar days, with a same-day trip
    counted as :data:`MIN_TRIP_DAYS`. Every stage uses this one function.
    """
    return max((end - start).days, MIN_TRIP_DAYS)
