"""Pydantic models for incoming quote requests."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QuoteRequest(BaseModel):
    """Travel quote request; every field is optional at the model level.

    Missing values are reported by the validation engine rather than by
    pydantic, so a partially filled request still produces a structured
    ``ValidationOutcome``.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "person_first_name": "Jane",
                    "person_last_name": "Doe",
                    "person_birth_date": "1991-05-10",
                    "trip_start_date": "2027-03-01",
                    "trip_end_date": "2027-03-15",
                    "country_iso_code": "ES",
                    "coverage_level_code": "50000",
                    "selected_risks": ["SPORT_ACTIVITIES"],
                    "currency": "EUR",
                }
            ]
        },
    )

    person_first_name: Optional[str] = Field(default=None, description="Insured person's first name")
    person_last_name: Optional[str] = Field(default=None, description="Insured person's last name")
    person_birth_date: Optional[date] = Field(default=None, description="Insured person's birth date")
    trip_start_date: Optional[date] = Field(default=None, description="First day of cover")
    trip_end_date: Optional[date] = Field(default=None, description="Last day of cover")
    country_iso_code: Optional[str] = Field(
        default=None, description="Destination country, ISO 3166 alpha-2"
    )
    coverage_level_code: Optional[str] = Field(
        default=None, description="Medical coverage level code (MEDICAL_LEVEL mode)"
    )
    use_country_default: bool = Field(
        default=False,
        description="Price from the destination's default day premium instead of a coverage level",
    )
    selected_risks: Optional[list[Optional[str]]] = Field(
        default=None, description="Optional risk codes on top of the mandatory medical risk"
    )
    promo_code: Optional[str] = Field(default=None, description="Promotional discount code")
    persons_count: Optional[int] = Field(default=None, description="Number of insured persons")
    is_corporate: Optional[bool] = Field(default=None, description="Corporate client flag")
    currency: Optional[str] = Field(default=None, description="Requested currency code (echoed back)")
    apply_age_coefficient: Optional[bool] = Field(
        default=None,
        description="Override the system-wide age coefficient switch for this request",
    )

    def risk_codes(self) -> list[str]:
        """Selected risk codes with blank or absent elements dropped."""
        return [code for code in (self.selected_risks or []) if code and code.strip()]
