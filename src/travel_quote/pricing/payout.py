"""Payout-limit capping for MEDICAL_LEVEL premiums."""

from __future__ import annotations

from decimal import Decimal
from typing import NamedTuple, Optional

from loguru import logger

from travel_quote.core.money import to_money
from travel_quote.schemas.reference import CoverageLevel


class PayoutAdjustment(NamedTuple):
    premium: Decimal
    applied_limit: Optional[Decimal]
    applied: bool


def apply_payout_limit(premium: Decimal, level: CoverageLevel) -> PayoutAdjustment:
    """Scale *premium* by ``max_payout / coverage`` when the limit is lower.

    A missing limit, or one at or above the coverage amount, leaves the
    premium untouched.
    """
    limit = level.max_payout_amount
    if limit is None or limit >= level.coverage_amount:
        return PayoutAdjustment(premium, None, False)

    adjusted = to_money(premium * (limit / level.coverage_amount))
    logger.info(
        "Payout limit {limit} below coverage {coverage} for level {code}: premium {raw} -> {adj}",
        limit=limit,
        coverage=level.coverage_amount,
        code=level.code,
        raw=premium,
        adj=adjusted,
    )
    return PayoutAdjustment(adjusted, limit, True)
