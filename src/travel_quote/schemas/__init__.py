"""Pydantic schemas for the travel quote system."""

from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.reference import (
    AgeCoefficient,
    AgeRiskModifier,
    CountryProfile,
    CoverageLevel,
    DurationCoefficient,
    PromoCode,
    PromoDiscountKind,
    RiskBundle,
    RiskGroup,
    RiskProfile,
)
from travel_quote.schemas.results import (
    AppliedDiscount,
    DiscountResult,
    DiscountType,
    IssueSeverity,
    PricingMode,
    PricingResult,
    QuoteOutcome,
    QuoteStatus,
    RiskPremium,
    RuleEvaluation,
    RuleSeverity,
    UnderwritingDecision,
    UnderwritingResult,
    ValidationIssue,
    ValidationOutcome,
)

__all__ = [
    "QuoteRequest",
    "AgeCoefficient",
    "AgeRiskModifier",
    "CountryProfile",
    "CoverageLevel",
    "DurationCoefficient",
    "PromoCode",
    "PromoDiscountKind",
    "RiskBundle",
    "RiskGroup",
    "RiskProfile",
    "AppliedDiscount",
    "DiscountResult",
    "DiscountType",
    "IssueSeverity",
    "PricingMode",
    "PricingResult",
    "QuoteOutcome",
    "QuoteStatus",
    "RiskPremium",
    "RuleEvaluation",
    "RuleSeverity",
    "UnderwritingDecision",
    "UnderwritingResult",
    "ValidationIssue",
    "ValidationOutcome",
]
