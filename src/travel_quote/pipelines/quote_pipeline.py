"""Four-stage quote pipeline: validate → price → discount → underwrite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any, Optional, TypeVar

from loguru import logger
from omegaconf import DictConfig, OmegaConf

from travel_quote.core.dates import age_on, trip_days
from travel_quote.core.exceptions import QuoteComputationError
from travel_quote.discounts import DiscountEngine, DiscountSettings
from travel_quote.pipelines.base import BasePipeline
from travel_quote.pricing import PremiumCalculator
from travel_quote.reference.cache import ParameterCache
from travel_quote.reference.provider import ReferenceDataProvider
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import (
    PricingResult,
    QuoteOutcome,
    QuoteStatus,
    UnderwritingDecision,
    UnderwritingResult,
)
from travel_quote.underwriting import RuleParameters, UnderwritingContext, UnderwritingEngine
from travel_quote.underwriting import build_default_rules as build_underwriting_rules
from travel_quote.validation import ValidationContext, ValidationEngine, build_default_rules

T = TypeVar("T")

_DECISION_STATUS = {
    UnderwritingDecision.DECLINED: QuoteStatus.DECLINED,
    UnderwritingDecision.REQUIRES_MANUAL_REVIEW: QuoteStatus.REQUIRES_MANUAL_REVIEW,
    UnderwritingDecision.APPROVED: QuoteStatus.SUCCESS,
}


class QuotePipeline(BasePipeline):
    """Sequence the four quote stages over one reference-data snapshot.

    Validation findings are collected in full, then checked once: any
    CRITICAL or ERROR finding stops the pipeline before pricing. A
    DECLINED or REQUIRES_MANUAL_REVIEW decision is returned without the
    price.
    """

    def __init__(
        self,
        cfg: DictConfig,
        reference: ReferenceDataProvider,
        parameter_cache: Optional[ParameterCache] = None,
    ) -> None:
        super().__init__(cfg)
        self.reference = reference

        self.validation = ValidationEngine(
            build_default_rules(
                supported_currencies=list(cfg.validation.supported_currencies),
                max_age=cfg.validation.max_age,
                max_trip_days=cfg.validation.max_trip_days,
            )
        )
        self.calculator = PremiumCalculator(
            reference, age_coefficient_enabled=cfg.pricing.age_coefficient_enabled
        )
        self.discounts = DiscountEngine(
            reference,
            DiscountSettings.model_validate(OmegaConf.to_container(cfg.discounts, resolve=True)),
        )
        self.underwriting = UnderwritingEngine(
            build_underwriting_rules(RuleParameters(reference, parameter_cache))
        )

    def calculate(self, request: QuoteRequest, today: Optional[date] = None) -> QuoteOutcome:
        today = today or date.today()
        logger.info(
            "Quote requested: country={country} level={level} risks={risks}",
            country=request.country_iso_code,
            level=request.coverage_level_code if not request.use_country_default else "COUNTRY_DEFAULT",
            risks=request.risk_codes(),
        )

        # ── 1. Validation ──
        with logger.contextualize(stage="validation"):
            validation = self.validation.validate(
                request, ValidationContext(today=today, reference=self.reference)
            )
        if validation.has_blocking_issues:
            logger.info("Quote rejected by validation ({n} issue(s))", n=len(validation.issues))
            return QuoteOutcome(
                status=QuoteStatus.VALIDATION_FAILED,
                validation=validation,
                currency=request.currency or "EUR",
            )

        # ── 2. Pricing ──
        pricing = self._run_stage("pricing", self.calculator.calculate, request)

        # ── 3. Discounts ──
        discounts = self._run_stage("discounts", self.discounts.apply, pricing.premium, request, today)

        # ── 4. Underwriting ──
        underwriting = self._run_stage("underwriting", self._underwrite, request, pricing)

        status = _DECISION_STATUS[underwriting.decision]
        currency = request.currency or pricing.currency
        if status is not QuoteStatus.SUCCESS:
            return QuoteOutcome(
                status=status,
                validation=validation,
                underwriting=underwriting,
                currency=currency,
            )

        logger.info(
            "Quote approved: premium {premium}, final {final} {currency}",
            premium=pricing.premium,
            final=discounts.final_premium,
            currency=currency,
        )
        return QuoteOutcome(
            status=status,
            validation=validation,
            pricing=pricing,
            discounts=discounts,
            underwriting=underwriting,
            currency=currency,
        )

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    @staticmethod
    def _run_stage(stage: str, func: Callable[..., T], *args: Any) -> T:
        """Run one computation stage with ``stage`` bound into every log record.

        Any exception is logged with its traceback and re-raised as a
        :class:`QuoteComputationError` that names only the stage.
        """
        with logger.contextualize(stage=stage):
            try:
                return func(*args)
            except Exception as exc:
                logger.exception("Quote computation failed during {stage}", stage=stage)
                raise QuoteComputationError(stage) from exc

    def _underwrite(self, request: QuoteRequest, pricing: PricingResult) -> UnderwritingResult:
        return self.underwriting.evaluate(self._underwriting_context(request, pricing))

    def _underwriting_context(self, request: QuoteRequest, pricing: PricingResult) -> UnderwritingContext:
        start = request.trip_start_date
        country = self.reference.find_country(request.country_iso_code, start)
        if country is None:
            raise LookupError(f"Country not found: {request.country_iso_code}")
        return UnderwritingContext(
            request=request,
            age=age_on(request.person_birth_date, start),
            days=trip_days(start, request.trip_end_date),
            country=country,
            coverage_amount=pricing.coverage_amount,
            selected_risks=frozenset(code.upper() for code in request.risk_codes()),
        )
