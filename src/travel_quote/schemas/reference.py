"""Pydantic models for read-only reference data records."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskGroup(str, Enum):
    """Destination risk group, ordered from safest to riskiest."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class PromoDiscountKind(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class _ReferenceRecord(BaseModel):
    """Common active-date-range behaviour for reference records."""

    model_config = ConfigDict(frozen=True)

    valid_from: date = Field(..., description="First day the record is active")
    valid_to: Optional[date] = Field(default=None, description="Last active day (open-ended if null)")

    def is_active_on(self, on: date) -> bool:
        if on < self.valid_from:
            return False
        return self.valid_to is None or on <= self.valid_to


class CountryProfile(_ReferenceRecord):
    iso_code: str = Field(..., description="ISO 3166 alpha-2 code")
    name: str = Field(..., description="Display name")
    risk_group: RiskGroup = Field(..., description="Destination risk group")
    risk_coefficient: Decimal = Field(..., ge=0, description="Country risk coefficient")
    default_day_premium: Optional[Decimal] = Field(
        default=None, gt=0, description="Flat daily rate used in COUNTRY_DEFAULT mode"
    )
    default_day_premium_currency: Optional[str] = Field(
        default=None, description="Currency of the default day premium"
    )


class CoverageLevel(_ReferenceRecord):
    code: str = Field(..., description="Coverage level code, e.g. '50000'")
    coverage_amount: Decimal = Field(..., gt=0, description="Medical coverage ceiling")
    daily_rate: Decimal = Field(..., gt=0, description="Base daily rate")
    currency: str = Field(default="EUR", description="Currency of amount and rate")
    max_payout_amount: Optional[Decimal] = Field(
        default=None, gt=0, description="Configured payout limit; caps the coverage when lower"
    )


class RiskProfile(_ReferenceRecord):
    code: str = Field(..., description="Risk code, e.g. 'EXTREME_SPORT'")
    name: str = Field(..., description="Display name")
    coefficient: Decimal = Field(..., ge=0, description="Add-on coefficient (0 for the mandatory risk)")
    mandatory: bool = Field(default=False, description="Always included, never selectable")


class PromoCode(_ReferenceRecord):
    code: str
    description: str = ""
    discount_kind: PromoDiscountKind
    discount_value: Decimal = Field(..., gt=0)
    min_premium_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_usage_count: Optional[int] = Field(default=None, ge=0)
    current_usage_count: int = Field(default=0, ge=0)
    active: bool = True


class AgeCoefficient(_ReferenceRecord):
    age_from: int = Field(..., ge=0)
    age_to: int = Field(..., ge=0)
    coefficient: Decimal = Field(..., gt=0)
    description: str = ""


class DurationCoefficient(_ReferenceRecord):
    days_from: int = Field(..., ge=0)
    days_to: int = Field(..., ge=0)
    coefficient: Decimal = Field(..., gt=0)
    description: str = ""


class AgeRiskModifier(_ReferenceRecord):
    risk_code: str
    age_from: int = Field(..., ge=0)
    age_to: int = Field(..., ge=0)
    modifier: Decimal = Field(..., gt=0)
    description: str = ""


class RiskBundle(_ReferenceRecord):
    code: str
    name: str
    discount_percentage: Decimal = Field(..., gt=0, le=100)
    required_risks: tuple[str, ...] = Field(..., min_length=1)
