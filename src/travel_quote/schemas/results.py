"""Pydantic models produced by the four quote stages."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class IssueSeverity(str, Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationIssue(BaseModel):
    """A single validation finding."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Request field the finding refers to")
    message: str = Field(..., description="Human-readable message")
    severity: IssueSeverity = Field(default=IssueSeverity.ERROR)
    code: Optional[str] = Field(default=None, description="Stable error code for clients")

    @property
    def is_blocking(self) -> bool:
        return self.severity is not IssueSeverity.WARNING


class ValidationOutcome(BaseModel):
    """Ordered validation findings; an empty list means the request is valid."""

    model_config = ConfigDict(frozen=True)

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def has_blocking_issues(self) -> bool:
        return any(issue.is_blocking for issue in self.issues)

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.severity is IssueSeverity.CRITICAL for issue in self.issues)

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity is IssueSeverity.WARNING)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


class PricingMode(str, Enum):
    MEDICAL_LEVEL = "MEDICAL_LEVEL"
    COUNTRY_DEFAULT = "COUNTRY_DEFAULT"


class RiskPremium(BaseModel):
    """Per-risk contribution to the premium."""

    model_config = ConfigDict(frozen=True)

    risk_code: str
    risk_name: str
    premium: Decimal
    coefficient: Decimal
    age_modifier: Decimal


class PricingResult(BaseModel):
    """Output of the premium calculator.

    Only the fields of the active ``pricing_mode`` are populated: coverage
    and payout fields are ``None`` in COUNTRY_DEFAULT mode and
    ``default_day_premium`` is ``None`` in MEDICAL_LEVEL mode.
    """

    model_config = ConfigDict(frozen=True)

    pricing_mode: PricingMode
    premium: Decimal = Field(..., ge=0, description="Premium before discounts")
    base_rate: Decimal = Field(..., description="Daily rate the premium was built from")
    currency: str = "EUR"
    age: int
    age_group: str
    age_coefficient: Decimal
    country_coefficient: Decimal
    duration_coefficient: Decimal
    additional_risk_coefficient: Decimal
    total_coefficient: Decimal
    days: int
    risk_premiums: tuple[RiskPremium, ...] = ()
    formula: str = ""

    # MEDICAL_LEVEL only
    coverage_level_code: Optional[str] = None
    coverage_amount: Optional[Decimal] = None
    uncapped_premium: Optional[Decimal] = None
    applied_payout_limit: Optional[Decimal] = None
    payout_limit_applied: Optional[bool] = None

    # COUNTRY_DEFAULT only
    default_day_premium: Optional[Decimal] = None

    @property
    def effective_coverage(self) -> Optional[Decimal]:
        """Coverage ceiling after any payout limit."""
        if self.payout_limit_applied:
            return self.applied_payout_limit
        return self.coverage_amount


# ---------------------------------------------------------------------------
# Discounts
# ---------------------------------------------------------------------------


class DiscountType(str, Enum):
    PROMO_CODE = "PROMO_CODE"
    GROUP = "GROUP"
    CORPORATE = "CORPORATE"
    BUNDLE = "BUNDLE"


class AppliedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    discount_type: DiscountType
    code: str
    description: str
    amount: Decimal = Field(..., ge=0)
    percentage: Optional[Decimal] = None


class DiscountResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_premium: Decimal
    total_discount: Decimal = Field(..., ge=0)
    final_premium: Decimal = Field(..., ge=0)
    applied_discounts: tuple[AppliedDiscount, ...] = ()


# ---------------------------------------------------------------------------
# Underwriting
# ---------------------------------------------------------------------------


class RuleSeverity(str, Enum):
    """Ordered by how strongly a result affects the decision."""

    PASS = "PASS"
    WARNING = "WARNING"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"
    BLOCKING = "BLOCKING"


class UnderwritingDecision(str, Enum):
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    REQUIRES_MANUAL_REVIEW = "REQUIRES_MANUAL_REVIEW"


class RuleEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_name: str
    severity: RuleSeverity
    message: str

    @classmethod
    def passed(cls, rule_name: str) -> RuleEvaluation:
        return cls(rule_name=rule_name, severity=RuleSeverity.PASS, message="Rule passed")

    @classmethod
    def warning(cls, rule_name: str, message: str) -> RuleEvaluation:
        return cls(rule_name=rule_name, severity=RuleSeverity.WARNING, message=message)

    @classmethod
    def review(cls, rule_name: str, message: str) -> RuleEvaluation:
        return cls(rule_name=rule_name, severity=RuleSeverity.REVIEW_REQUIRED, message=message)

    @classmethod
    def blocking(cls, rule_name: str, message: str) -> RuleEvaluation:
        return cls(rule_name=rule_name, severity=RuleSeverity.BLOCKING, message=message)


class UnderwritingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: UnderwritingDecision
    reason: Optional[str] = Field(default=None, description="Null when approved")
    evaluations: tuple[RuleEvaluation, ...] = ()


# ---------------------------------------------------------------------------
# Pipeline outcome
# ---------------------------------------------------------------------------


class QuoteStatus(str, Enum):
    SUCCESS = "SUCCESS"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DECLINED = "DECLINED"
    REQUIRES_MANUAL_REVIEW = "REQUIRES_MANUAL_REVIEW"


class QuoteOutcome(BaseModel):
    """What the pipeline hands back to its caller.

    ``pricing`` and ``discounts`` are only set on SUCCESS; ``underwriting``
    is set whenever the underwriting stage ran.
    """

    model_config = ConfigDict(frozen=True)

    status: QuoteStatus
    validation: ValidationOutcome = Field(default_factory=ValidationOutcome)
    pricing: Optional[PricingResult] = None
    discounts: Optional[DiscountResult] = None
    underwriting: Optional[UnderwritingResult] = None
    currency: str = "EUR"

    @property
    def final_premium(self) -> Optional[Decimal]:
        return self.discounts.final_premium if self.discounts else None
