"""Concrete validation rules, grouped by level.

Orders:
  10-99    structural (nulls, blanks, lengths, shapes)
  100-199  business (dates, age, duration, duplicates)
  200-299  reference data (existence checks against the provider)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from travel_quote.core.dates import age_on
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import ValidationIssue
from travel_quote.validation.base import FieldRule, ValidationContext, ValidationRule

# Error codes
NOT_NULL = "validation.not_null"
NOT_BLANK = "validation.not_blank"
INVALID_LENGTH = "validation.invalid_length"
INVALID_FORMAT = "validation.invalid_format"
DATE_NOT_IN_PAST = "validation.date.not_in_past"
DATE_IN_PAST = "validation.date.in_past"
DATE_TOO_FAR = "validation.date.too_far"
INVALID_DATE_RANGE = "validation.date.invalid_range"
AGE_TOO_LOW = "validation.age.too_low"
AGE_TOO_HIGH = "validation.age.too_high"
TRIP_TOO_LONG = "validation.trip.too_long"
DUPLICATE_RISK = "validation.risk_type.duplicate"
COUNTRY_NOT_FOUND = "validation.country.not_found"
COVERAGE_LEVEL_NOT_FOUND = "validation.coverage_level.not_found"
DEFAULT_PREMIUM_NOT_FOUND = "validation.country.default_premium_not_found"
RISK_TYPE_NOT_FOUND = "validation.risk_type.not_found"
RISK_TYPE_MANDATORY = "validation.risk_type.mandatory"
CURRENCY_NOT_SUPPORTED = "validation.currency.not_supported"

# Context attribute keys
AGE_ATTRIBUTE = "person_age"
COUNTRY_ATTRIBUTE = "country"

MIN_AGE = 0
MAX_AGE = 80
MAX_TRIP_DAYS = 365
MAX_DAYS_AHEAD = 365
DEFAULT_SUPPORTED_CURRENCIES = ("EUR", "USD", "GBP", "CHF", "JPY")

_UPPER_ALPHA = re.compile(r"^[A-Z]+$")


# ═══════════════════════════════════════════════════════════════════════
# Structural
# ═══════════════════════════════════════════════════════════════════════


class NotNullRule(FieldRule):
    order = 10
    critical = True

    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]:
        if value is None:
            return [self.critical_issue(self.field_name, f"Field {self.field_name} must not be null!", NOT_NULL)]
        return []


class CoverageLevelRequiredRule(ValidationRule):
    """Coverage level is required unless the country default rate is requested."""

    name = "CoverageLevelRequiredRule"
    order = 15

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        if request.use_country_default:
            return []
        level = request.coverage_level_code
        if level is None:
            return [
                self.critical_issue(
                    "coverage_level_code", "Field coverage_level_code must not be null!", NOT_NULL
                )
            ]
        if not level.strip():
            return [self.error("coverage_level_code", "Field coverage_level_code must not be empty!", NOT_BLANK)]
        return []


class NotBlankRule(FieldRule):
    order = 20

    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]:
        if value is not None and not str(value).strip():
            return [self.error(self.field_name, f"Field {self.field_name} must not be empty!", NOT_BLANK)]
        return []


class StringLengthRule(FieldRule):
    order = 30

    def __init__(self, field_name: str, min_length: int = 1, max_length: int = 100) -> None:
        super().__init__(field_name)
        self.min_length = min_length
        self.max_length = max_length

    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]:
        if value is None:
            return []
        length = len(value)
        if length < self.min_length:
            return [
                self.error(
                    self.field_name,
                    f"Field {self.field_name} must be at least {self.min_length} characters long!",
                    INVALID_LENGTH,
                )
            ]
        if length > self.max_length:
            return [
                self.error(
                    self.field_name,
                    f"Field {self.field_name} must be at most {self.max_length} characters long!",
                    INVALID_LENGTH,
                )
            ]
        return []


class IsoCodeRule(FieldRule):
    """Shape check only; whether the code resolves is a reference-level rule."""

    order = 40

    def __init__(self, field_name: str, length: int = 2) -> None:
        super().__init__(field_name)
        self.length = length

    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]:
        if value is None or not value.strip():
            return []
        if len(value) != self.length:
            return [
                self.error(
                    self.field_name,
                    f"Field {self.field_name} must be exactly {self.length} characters long!",
                    INVALID_FORMAT,
                )
            ]
        if not _UPPER_ALPHA.match(value):
            return [
                self.error(
                    self.field_name,
                    f"Field {self.field_name} must contain only uppercase letters!",
                    INVALID_FORMAT,
                )
            ]
        return []


# ═══════════════════════════════════════════════════════════════════════
# Business
# ═══════════════════════════════════════════════════════════════════════


class DateInPastRule(FieldRule):
    order = 110

    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]:
        if value is not None and value >= context.today:
            return [self.error(self.field_name, f"Field {self.field_name} must be in the past!", DATE_NOT_IN_PAST)]
        return []


class DateOrderRule(ValidationRule):
    name = "DateOrderRule"
    order = 120

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start, end = request.trip_start_date, request.trip_end_date
        if start is not None and end is not None and end < start:
            return [
                self.error(
                    "trip_end_date",
                    "trip_end_date must be greater than or equal to trip_start_date!",
                    INVALID_DATE_RANGE,
                )
            ]
        return []


class AgeRangeRule(ValidationRule):
    """Age on the trip start date must be within ``MIN_AGE..max_age``."""

    name = "AgeRangeRule"
    order = 130

    def __init__(self, max_age: int = MAX_AGE) -> None:
        self.max_age = max_age

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        birth, start = request.person_birth_date, request.trip_start_date
        if birth is None or start is None:
            return []

        age = age_on(birth, start)
        context.attributes[AGE_ATTRIBUTE] = age

        if age < MIN_AGE:
            return [self.error("person_birth_date", f"Person age must be at least {MIN_AGE} years!", AGE_TOO_LOW)]
        if age > self.max_age:
            return [
                self.error("person_birth_date", f"Person age must be at most {self.max_age} years!", AGE_TOO_HIGH)
            ]
        return []


class TripDurationLimitRule(ValidationRule):
    name = "TripDurationLimitRule"
    order = 140

    def __init__(self, max_days: int = MAX_TRIP_DAYS) -> None:
        self.max_days = max_days

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start, end = request.trip_start_date, request.trip_end_date
        if start is None or end is None or end < start:
            return []
        if (end - start).days > self.max_days:
            return [
                self.error("trip_end_date", f"Trip duration must not exceed {self.max_days} days!", TRIP_TOO_LONG)
            ]
        return []


class StartDateNotTooFarRule(ValidationRule):
    name = "StartDateNotTooFarRule"
    order = 145

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start = request.trip_start_date
        if start is None:
            return []
        if (start - context.today).days > MAX_DAYS_AHEAD:
            return [
                self.warning(
                    "trip_start_date",
                    f"Trip start date is more than {MAX_DAYS_AHEAD} days in the future.",
                    DATE_TOO_FAR,
                )
            ]
        return []


class PastTripWarningRule(ValidationRule):
    """Advisory only: a start date in the past never blocks the quote."""

    name = "PastTripWarningRule"
    order = 150

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start = request.trip_start_date
        if start is not None and start < context.today:
            return [
                self.warning(
                    "trip_start_date",
                    "Trip start date is in the past. Are you sure this is correct?",
                    DATE_IN_PAST,
                )
            ]
        return []


class DuplicateRisksRule(ValidationRule):
    name = "DuplicateRisksRule"
    order = 165

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        seen: set[str] = set()
        issues: list[ValidationIssue] = []
        for index, code in _indexed_risks(request):
            normalized = code.strip().upper()
            if normalized in seen:
                issues.append(
                    self.error(
                        f"selected_risks[{index}]",
                        f"Risk '{code}' appears multiple times in the list!",
                        DUPLICATE_RISK,
                    )
                )
            seen.add(normalized)
        return issues


# ═══════════════════════════════════════════════════════════════════════
# Reference data
# ═══════════════════════════════════════════════════════════════════════


class CountryExistsRule(ValidationRule):
    name = "CountryExistsRule"
    order = 210

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        code, start = request.country_iso_code, request.trip_start_date
        if not code or not code.strip() or start is None:
            return []
        country = context.reference.find_country(code, start)
        if country is None:
            return [
                self.error(
                    "country_iso_code",
                    f"Country with ISO code '{code}' not found or not active on {start}!",
                    COUNTRY_NOT_FOUND,
                )
            ]
        context.attributes[COUNTRY_ATTRIBUTE] = country
        return []


class CoverageLevelExistsRule(ValidationRule):
    name = "CoverageLevelExistsRule"
    order = 220

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        code, start = request.coverage_level_code, request.trip_start_date
        if request.use_country_default or not code or not code.strip() or start is None:
            return []
        if context.reference.find_coverage_level(code, start) is None:
            return [
                self.error(
                    "coverage_level_code",
                    f"Coverage level '{code}' not found or not active on {start}!",
                    COVERAGE_LEVEL_NOT_FOUND,
                )
            ]
        return []


class CountryDefaultPremiumRule(ValidationRule):
    """COUNTRY_DEFAULT mode needs a default day premium on the destination."""

    name = "CountryDefaultPremiumRule"
    order = 225

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        if not request.use_country_default:
            return []
        country = context.attributes.get(COUNTRY_ATTRIBUTE)
        if country is not None and country.default_day_premium is None:
            return [
                self.error(
                    "country_iso_code",
                    f"Country '{country.iso_code}' has no default day premium!",
                    DEFAULT_PREMIUM_NOT_FOUND,
                )
            ]
        return []


class RiskExistsRule(ValidationRule):
    name = "RiskExistsRule"
    order = 230

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start = request.trip_start_date
        if start is None:
            return []
        return [
            self.error(
                f"selected_risks[{index}]",
                f"Risk type '{code}' not found or not active on {start}!",
                RISK_TYPE_NOT_FOUND,
            )
            for index, code in _indexed_risks(request)
            if context.reference.find_risk(code, start) is None
        ]


class RiskNotMandatoryRule(ValidationRule):
    name = "RiskNotMandatoryRule"
    order = 240

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        start = request.trip_start_date
        if start is None:
            return []
        issues = []
        for index, code in _indexed_risks(request):
            risk = context.reference.find_risk(code, start)
            if risk is not None and risk.mandatory:
                issues.append(
                    self.error(
                        f"selected_risks[{index}]",
                        f"Risk type '{code}' is mandatory and cannot be included in selected_risks!",
                        RISK_TYPE_MANDATORY,
                    )
                )
        return issues


class CurrencySupportedRule(ValidationRule):
    name = "CurrencySupportedRule"
    order = 250

    def __init__(self, supported: Iterable[str] = DEFAULT_SUPPORTED_CURRENCIES) -> None:
        self.supported = tuple(supported)

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        currency = request.currency
        if currency is None or not currency.strip():
            return []
        if currency not in self.supported:
            return [
                self.error(
                    "currency",
                    f"Currency '{currency}' is not supported! Supported currencies: {', '.join(self.supported)}",
                    CURRENCY_NOT_SUPPORTED,
                )
            ]
        return []


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def build_default_rules(
    supported_currencies: Iterable[str] = DEFAULT_SUPPORTED_CURRENCIES,
    max_age: int = MAX_AGE,
    max_trip_days: int = MAX_TRIP_DAYS,
) -> list[ValidationRule]:
    """The standard rule set, unsorted. :class:`ValidationEngine` orders it."""
    return [
        NotNullRule("person_first_name"),
        NotNullRule("person_last_name"),
        NotNullRule("person_birth_date"),
        NotNullRule("trip_start_date"),
        NotNullRule("trip_end_date"),
        NotNullRule("country_iso_code"),
        CoverageLevelRequiredRule(),
        NotBlankRule("person_first_name"),
        NotBlankRule("person_last_name"),
        NotBlankRule("country_iso_code"),
        StringLengthRule("person_first_name", 1, 100),
        StringLengthRule("person_last_name", 1, 100),
        IsoCodeRule("country_iso_code", 2),
        DateInPastRule("person_birth_date"),
        DateOrderRule(),
        AgeRangeRule(max_age),
        TripDurationLimitRule(max_trip_days),
        StartDateNotTooFarRule(),
        PastTripWarningRule(),
        DuplicateRisksRule(),
        CountryExistsRule(),
        CoverageLevelExistsRule(),
        CountryDefaultPremiumRule(),
        RiskExistsRule(),
        RiskNotMandatoryRule(),
        CurrencySupportedRule(supported_currencies),
    ]


def _indexed_risks(request: QuoteRequest) -> list[tuple[int, str]]:
    """Selected risks with their list positions; blank elements are skipped."""
    return [
        (index, code)
        for index, code in enumerate(request.selected_risks or [])
        if code is not None and code.strip()
    ]
