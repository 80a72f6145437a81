"""Discount engine: promo code, group, corporate and bundle discounts.

Sources are evaluated in that fixed order against the same base premium;
each contributes at most one :class:`AppliedDiscount`. The summed discount
is capped at the base premium so the final premium never goes negative.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from travel_quote.core.money import ZERO, percentage_of, to_money
from travel_quote.reference.provider import ReferenceDataProvider
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.reference import PromoDiscountKind
from travel_quote.schemas.results import AppliedDiscount, DiscountResult, DiscountType


class GroupTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    min_persons: int = Field(..., ge=1)
    percentage: Decimal = Field(..., gt=0, le=100)


class DiscountSettings(BaseModel):
    """Group and corporate discount tables (``cfg.discounts``)."""

    model_config = ConfigDict(frozen=True)

    group_tiers: tuple[GroupTier, ...] = (
        GroupTier(code="GROUP_5", min_persons=5, percentage=Decimal("10")),
        GroupTier(code="GROUP_10", min_persons=10, percentage=Decimal("15")),
        GroupTier(code="GROUP_20", min_persons=20, percentage=Decimal("20")),
    )
    corporate_percentage: Decimal = Field(default=Decimal("20"), ge=0, le=100)
    corporate_min_premium: Decimal = Field(default=Decimal("100"), ge=0)


class DiscountEngine:
    def __init__(self, reference: ReferenceDataProvider, settings: Optional[DiscountSettings] = None) -> None:
        self.reference = reference
        self.settings = settings or DiscountSettings()

    def apply(self, base_premium: Decimal, request: QuoteRequest, today: date) -> DiscountResult:
        """Apply every qualifying discount to *base_premium*.

        Parameters
        ----------
        base_premium:
            Premium produced by the calculator.
        request:
            The validated request (promo code, persons, corporate flag, risks).
        today:
            Quote date; promo-code validity windows are checked against it.

        Returns
        -------
        DiscountResult
            Applied discounts, their capped total and the final premium.
        """
        applied: list[AppliedDiscount] = []
        for source in (self._promo_code, self._group, self._corporate, self._bundle):
            discount = source(base_premium, request, today)
            if discount is not None:
                applied.append(discount)

        total = sum((d.amount for d in applied), ZERO)
        if total > base_premium:
            logger.info(
                "Total discount {total} exceeds premium {premium}; capping",
                total=total,
                premium=base_premium,
            )
            total = base_premium
        total = to_money(total)
        final = to_money(max(base_premium - total, ZERO))

        logger.info(
            "Discounts applied: {codes} → total {total}, final premium {final}",
            codes=[d.code for d in applied],
            total=total,
            final=final,
        )
        return DiscountResult(
            base_premium=to_money(base_premium),
            total_discount=total,
            final_premium=final,
            applied_discounts=tuple(applied),
        )

    # -----------------------------------------------------------------
    # Sources
    # -----------------------------------------------------------------

    def _promo_code(self, premium: Decimal, request: QuoteRequest, today: date) -> Optional[AppliedDiscount]:
        code = (request.promo_code or "").strip()
        if not code:
            return None

        promo = self.reference.find_promo_code(code, today)
        reason = None
        if promo is None:
            reason = "not found"
        elif not promo.active:
            reason = "inactive"
        elif not promo.is_active_on(today):
            reason = f"outside validity window {promo.valid_from}..{promo.valid_to or 'open'}"
        elif promo.min_premium_amount is not None and premium < promo.min_premium_amount:
            reason = f"premium {premium} below minimum {promo.min_premium_amount}"
        elif promo.max_usage_count is not None and promo.current_usage_count >= promo.max_usage_count:
            reason = "usage limit reached"

        if reason is not None:
            logger.warning("Promo code {code} ignored: {reason}", code=code, reason=reason)
            return None

        if promo.discount_kind is PromoDiscountKind.PERCENTAGE:
            amount = percentage_of(premium, promo.discount_value)
            percentage: Optional[Decimal] = promo.discount_value
        else:
            amount = to_money(promo.discount_value)
            percentage = None
        amount = min(amount, premium)

        return AppliedDiscount(
            discount_type=DiscountType.PROMO_CODE,
            code=promo.code,
            description=promo.description or f"Promo code {promo.code}",
            amount=amount,
            percentage=percentage,
        )

    def _group(self, premium: Decimal, request: QuoteRequest, today: date) -> Optional[AppliedDiscount]:
        persons = request.persons_count or 0
        eligible = [tier for tier in self.settings.group_tiers if persons >= tier.min_persons]
        if not eligible:
            return None
        tier = max(eligible, key=lambda t: t.percentage)
        return AppliedDiscount(
            discount_type=DiscountType.GROUP,
            code=tier.code,
            description=f"Group discount {tier.min_persons}+ persons",
            amount=percentage_of(premium, tier.percentage),
            percentage=tier.percentage,
        )

    def _corporate(self, premium: Decimal, request: QuoteRequest, today: date) -> Optional[AppliedDiscount]:
        if not request.is_corporate or premium < self.settings.corporate_min_premium:
            return None
        return AppliedDiscount(
            discount_type=DiscountType.CORPORATE,
            code="CORPORATE",
            description="Corporate discount",
            amount=percentage_of(premium, self.settings.corporate_percentage),
            percentage=self.settings.corporate_percentage,
        )

    def _bundle(self, premium: Decimal, request: QuoteRequest, today: date) -> Optional[AppliedDiscount]:
        selected = {code.upper() for code in request.risk_codes()}
        if not selected or request.trip_start_date is None:
            return None
        candidates = [
            bundle
            for bundle in self.reference.find_risk_bundles(request.trip_start_date)
            if {r.upper() for r in bundle.required_risks} <= selected
        ]
        if not candidates:
            return None
        bundle = max(candidates, key=lambda b: b.discount_percentage)
        return AppliedDiscount(
            discount_type=DiscountType.BUNDLE,
            code=bundle.code,
            description=bundle.name,
            amount=percentage_of(premium, bundle.discount_percentage),
            percentage=bundle.discount_percentage,
        )
