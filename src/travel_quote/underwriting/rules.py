"""Underwriting rules.

Each rule looks at an :class:`UnderwritingContext` and returns one
:class:`RuleEvaluation`. Thresholds are read from :class:`RuleParameters`
on every evaluation so they can change in the reference tables without
touching the rule classes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from loguru import logger

from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.reference import CountryProfile
from travel_quote.schemas.results import RuleEvaluation
from travel_quote.underwriting.config import RuleParameters

EXTREME_SPORT = "EXTREME_SPORT"


@dataclass(frozen=True)
class UnderwritingContext:
    request: QuoteRequest
    age: int
    days: int
    country: CountryProfile
    coverage_amount: Optional[Decimal]
    selected_risks: frozenset[str]


class UnderwritingRule(ABC):
    name: str = "UnderwritingRule"
    order: int = 100

    def __init__(self, parameters: RuleParameters) -> None:
        self.parameters = parameters

    @abstractmethod
    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order})"


class AgeRule(UnderwritingRule):
    name = "AgeRule"
    order = 10

    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
        max_age = self.parameters.get_int(self.name, "MAX_AGE", 80)
        review_age = self.parameters.get_int(self.name, "REVIEW_AGE_THRESHOLD", 75)
        age = context.age

        if age > max_age:
            return RuleEvaluation.blocking(self.name, f"Age {age} exceeds maximum allowed age of {max_age}")
        if age >= review_age:
            return RuleEvaluation.review(
                self.name, f"Age {age} requires manual review (threshold: {review_age})"
            )
        return RuleEvaluation.passed(self.name)


class CountryRiskRule(UnderwritingRule):
    """Destination risk group mapped to a severity.

    Each severity reads its list of risk groups from the rule parameters;
    a group in none of the lists passes.
    """

    name = "CountryRiskRule"
    order = 20

    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
        country = context.country
        group = country.risk_group.value
        blocking = self.parameters.get_names(self.name, "BLOCKING_RISK_GROUPS", frozenset({"VERY_HIGH"}))
        review = self.parameters.get_names(self.name, "REVIEW_RISK_GROUPS", frozenset({"HIGH"}))
        warning = self.parameters.get_names(self.name, "WARNING_RISK_GROUPS", frozenset({"MEDIUM"}))

        if group in blocking:
            return RuleEvaluation.blocking(
                self.name, f"Travel to {country.name} is not covered due to {_label(group)} risk"
            )
        if group in review:
            return RuleEvaluation.review(
                self.name, f"Travel to {country.name} requires manual review due to {_label(group)} risk"
            )
        if group in warning:
            return RuleEvaluation.warning(self.name, f"Travel to {country.name} has {_label(group)} risk level")
        return RuleEvaluation.passed(self.name)


class MedicalCoverageRule(UnderwritingRule):
    """High coverage at advanced age; passes when no coverage level is priced."""

    name = "MedicalCoverageRule"
    order = 30

    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
        coverage = context.coverage_amount
        if coverage is None:
            return RuleEvaluation.passed(self.name)

        review_age = self.parameters.get_int(self.name, "REVIEW_AGE", 70)
        blocking_age = self.parameters.get_int(self.name, "BLOCKING_AGE", 75)
        review_coverage = self.parameters.get_decimal(
            self.name, "REVIEW_COVERAGE_THRESHOLD", Decimal("100000")
        )
        blocking_coverage = self.parameters.get_decimal(
            self.name, "BLOCKING_COVERAGE_THRESHOLD", Decimal("200000")
        )
        age = context.age

        if age > blocking_age and coverage > blocking_coverage:
            return RuleEvaluation.blocking(
                self.name,
                f"Coverage of {coverage} EUR is too high for age {age} (max {blocking_coverage} EUR)",
            )
        if age >= review_age and coverage > review_coverage:
            return RuleEvaluation.review(
                self.name, f"High coverage ({coverage} EUR) for age {age} requires manual review"
            )
        return RuleEvaluation.passed(self.name)


class AdditionalRisksRule(UnderwritingRule):
    name = "AdditionalRisksRule"
    order = 40

    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
        if EXTREME_SPORT not in context.selected_risks:
            return RuleEvaluation.passed(self.name)

        max_age = self.parameters.get_int(self.name, "MAX_AGE_FOR_EXTREME_SPORT", 70)
        review_age = self.parameters.get_int(self.name, "REVIEW_AGE_FOR_EXTREME_SPORT", 60)
        age = context.age

        if age > max_age:
            return RuleEvaluation.blocking(
                self.name, f"Extreme sport coverage not available for age {age} (max age: {max_age})"
            )
        excluded = self.parameters.get_names(
            self.name, "EXCLUDED_RISK_GROUPS_FOR_EXTREME_SPORT", frozenset({"VERY_HIGH"})
        )
        if context.country.risk_group.value in excluded:
            return RuleEvaluation.blocking(
                self.name,
                f"Extreme sport coverage not available in {context.country.name} "
                f"({_label(context.country.risk_group.value)} risk country)",
            )
        if age >= review_age:
            return RuleEvaluation.review(
                self.name, f"Extreme sport coverage for age {age} requires manual review"
            )
        return RuleEvaluation.passed(self.name)


class TripDurationRule(UnderwritingRule):
    name = "TripDurationRule"
    order = 50

    def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
        max_days = self.parameters.get_int(self.name, "MAX_DAYS", 180)
        review_days = self.parameters.get_int(self.name, "REVIEW_DAYS_THRESHOLD", 90)
        days = context.days

        if days > max_days:
            return RuleEvaluation.blocking(
                self.name,
                f"Trip duration of {days} days exceeds maximum of {max_days} days. "
                "Please apply for long-term insurance.",
            )
        if days > review_days:
            return RuleEvaluation.review(
                self.name,
                f"Trip duration of {days} days requires manual review (threshold: {review_days} days)",
            )
        return RuleEvaluation.passed(self.name)


def _label(group: str) -> str:
    return group.lower().replace("_", " ")


def build_default_rules(parameters: RuleParameters) -> list[UnderwritingRule]:
    rules: list[UnderwritingRule] = [
        AgeRule(parameters),
        CountryRiskRule(parameters),
        MedicalCoverageRule(parameters),
        AdditionalRisksRule(parameters),
        TripDurationRule(parameters),
    ]
    logger.debug("Underwriting rules: {rules}", rules=rules)
    return rules
