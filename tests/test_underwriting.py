"""Tests for underwriting rules, rule parameters and the decision engine."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

import pytest

from travel_quote.reference.cache import ParameterCache
from travel_quote.reference.memory import InMemoryReferenceData
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import RuleEvaluation, RuleSeverity, UnderwritingDecision
from travel_quote.underwriting import (
    RuleParameters,
    UnderwritingContext,
    UnderwritingEngine,
    UnderwritingRule,
    build_default_rules,
)
from travel_quote.underwriting.rules import (
    AdditionalRisksRule,
    AgeRule,
    CountryRiskRule,
    MedicalCoverageRule,
    TripDurationRule,
)


@pytest.fixture()
def parameters(reference: InMemoryReferenceData) -> RuleParameters:
    return RuleParameters(reference, ParameterCache())


@pytest.fixture()
def context(reference: InMemoryReferenceData, valid_request: QuoteRequest):
    """Build an :class:`UnderwritingContext`; defaults describe a plain approvable quote."""

    def _context(
        age: int = 35,
        days: int = 14,
        country: str = "ES",
        coverage: Optional[str] = "50000",
        risks: tuple[str, ...] = (),
    ) -> UnderwritingContext:
        return UnderwritingContext(
            request=valid_request,
            age=age,
            days=days,
            country=reference.find_country(country, valid_request.trip_start_date),
            coverage_amount=Decimal(coverage) if coverage else None,
            selected_risks=frozenset(risks),
        )

    return _context


class TestRules:
    # ── 1. Age ──────────────────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("age", "severity"),
        [(35, RuleSeverity.PASS), (75, RuleSeverity.REVIEW_REQUIRED), (80, RuleSeverity.REVIEW_REQUIRED),
         (81, RuleSeverity.BLOCKING)],
    )
    def test_age_rule(self, parameters, context, age: int, severity: RuleSeverity) -> None:
        assert AgeRule(parameters).evaluate(context(age=age)).severity is severity

    def test_age_rule_message(self, parameters, context) -> None:
        evaluation = AgeRule(parameters).evaluate(context(age=81))
        assert evaluation.message == "Age 81 exceeds maximum allowed age of 80"

    # ── 2. Country risk ─────────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("country", "severity"),
        [
            ("ES", RuleSeverity.PASS),
            ("TR", RuleSeverity.WARNING),
            ("EG", RuleSeverity.REVIEW_REQUIRED),
            ("AF", RuleSeverity.BLOCKING),
        ],
    )
    def test_country_risk_rule(self, parameters, context, country: str, severity: RuleSeverity) -> None:
        assert CountryRiskRule(parameters).evaluate(context(country=country)).severity is severity

    def test_country_review_message(self, parameters, context) -> None:
        evaluation = CountryRiskRule(parameters).evaluate(context(country="EG"))
        assert evaluation.message == "Travel to Egypt requires manual review due to high risk"

    # ── 3. Medical coverage ─────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("age", "coverage", "severity"),
        [
            (69, "500000", RuleSeverity.PASS),
            (70, "100000", RuleSeverity.PASS),
            (70, "200000", RuleSeverity.REVIEW_REQUIRED),
            (75, "200000", RuleSeverity.REVIEW_REQUIRED),
            (76, "200000", RuleSeverity.REVIEW_REQUIRED),
            (76, "500000", RuleSeverity.BLOCKING),
            (80, None, RuleSeverity.PASS),
        ],
    )
    def test_medical_coverage_rule(
        self, parameters, context, age: int, coverage: Optional[str], severity: RuleSeverity
    ) -> None:
        evaluation = MedicalCoverageRule(parameters).evaluate(context(age=age, coverage=coverage))
        assert evaluation.severity is severity

    def test_medical_coverage_review_message(self, parameters, context) -> None:
        evaluation = MedicalCoverageRule(parameters).evaluate(context(age=75, coverage="200000"))
        assert evaluation.message == "High coverage (200000 EUR) for age 75 requires manual review"

    # ── 4. Additional risks ─────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("age", "country", "risks", "severity"),
        [
            (80, "ES", (), RuleSeverity.PASS),
            (40, "ES", ("EXTREME_SPORT",), RuleSeverity.PASS),
            (60, "ES", ("EXTREME_SPORT",), RuleSeverity.REVIEW_REQUIRED),
            (70, "ES", ("EXTREME_SPORT",), RuleSeverity.REVIEW_REQUIRED),
            (71, "ES", ("EXTREME_SPORT",), RuleSeverity.BLOCKING),
            (30, "AF", ("EXTREME_SPORT",), RuleSeverity.BLOCKING),
            (30, "AF", ("SPORT_ACTIVITIES",), RuleSeverity.PASS),
        ],
    )
    def test_additional_risks_rule(
        self, parameters, context, age: int, country: str, risks: tuple[str, ...], severity: RuleSeverity
    ) -> None:
        evaluation = AdditionalRisksRule(parameters).evaluate(context(age=age, country=country, risks=risks))
        assert evaluation.severity is severity

    # ── 5. Trip duration ────────────────────────────────────────────────

    @pytest.mark.parametrize(
        ("days", "severity"),
        [(90, RuleSeverity.PASS), (91, RuleSeverity.REVIEW_REQUIRED), (180, RuleSeverity.REVIEW_REQUIRED),
         (181, RuleSeverity.BLOCKING)],
    )
    def test_trip_duration_rule(self, parameters, context, days: int, severity: RuleSeverity) -> None:
        assert TripDurationRule(parameters).evaluate(context(days=days)).severity is severity


class TestRuleParameters:
    def test_thresholds_come_from_reference(self, valid_request, context) -> None:
        reference = InMemoryReferenceData(rule_parameters={("AgeRule", "MAX_AGE"): "70"})
        rule = AgeRule(RuleParameters(reference, ParameterCache()))
        evaluation = rule.evaluate(context(age=72))
        assert evaluation.severity is RuleSeverity.BLOCKING
        assert evaluation.message == "Age 72 exceeds maximum allowed age of 70"

    def test_unparseable_value_uses_default(self) -> None:
        reference = InMemoryReferenceData(rule_parameters={("AgeRule", "MAX_AGE"): "eighty"})
        assert RuleParameters(reference).get_int("AgeRule", "MAX_AGE", 80) == 80

    def test_decimal_parameter(self) -> None:
        reference = InMemoryReferenceData(
            rule_parameters={("MedicalCoverageRule", "REVIEW_COVERAGE_THRESHOLD"): "150000"}
        )
        params = RuleParameters(reference)
        assert params.get_decimal("MedicalCoverageRule", "REVIEW_COVERAGE_THRESHOLD", Decimal("1")) == Decimal(
            "150000"
        )

    def test_values_are_cached_per_rule_and_parameter(self) -> None:
        settings = {("TripDurationRule", "MAX_DAYS"): "120"}
        reference = InMemoryReferenceData(rule_parameters=settings)
        cache = ParameterCache()
        params = RuleParameters(reference, cache)

        assert params.get_int("TripDurationRule", "MAX_DAYS", 180) == 120
        reference._rule_parameters[("TripDurationRule", "MAX_DAYS")] = "60"
        assert params.get_int("TripDurationRule", "MAX_DAYS", 180) == 120
        assert ("TripDurationRule", "MAX_DAYS") in cache
        assert len(cache) == 1

    def test_misses_are_cached_too(self) -> None:
        cache = ParameterCache()
        params = RuleParameters(InMemoryReferenceData(), cache)
        assert params.get_int("AgeRule", "MAX_AGE", 80) == 80
        assert ("AgeRule", "MAX_AGE") in cache

    def test_name_list_parameter(self) -> None:
        reference = InMemoryReferenceData(
            rule_parameters={("CountryRiskRule", "REVIEW_RISK_GROUPS"): " high, very_high ,"}
        )
        params = RuleParameters(reference)
        assert params.get_names("CountryRiskRule", "REVIEW_RISK_GROUPS", frozenset()) == {"HIGH", "VERY_HIGH"}
        assert params.get_names("CountryRiskRule", "WARNING_RISK_GROUPS", frozenset({"MEDIUM"})) == {"MEDIUM"}

    def test_country_risk_groups_come_from_reference(self, context) -> None:
        reference = InMemoryReferenceData(
            rule_parameters={
                ("CountryRiskRule", "BLOCKING_RISK_GROUPS"): "VERY_HIGH,HIGH",
                ("CountryRiskRule", "WARNING_RISK_GROUPS"): "",
            }
        )
        rule = CountryRiskRule(RuleParameters(reference, ParameterCache()))

        declined = rule.evaluate(context(country="EG"))
        assert declined.severity is RuleSeverity.BLOCKING
        assert declined.message == "Travel to Egypt is not covered due to high risk"
        assert rule.evaluate(context(country="TR")).severity is RuleSeverity.PASS

    def test_extreme_sport_excluded_groups_from_reference(self, context) -> None:
        reference = InMemoryReferenceData(
            rule_parameters={("AdditionalRisksRule", "EXCLUDED_RISK_GROUPS_FOR_EXTREME_SPORT"): "HIGH,VERY_HIGH"}
        )
        rule = AdditionalRisksRule(RuleParameters(reference, ParameterCache()))
        evaluation = rule.evaluate(context(age=30, country="EG", risks=("EXTREME_SPORT",)))
        assert evaluation.severity is RuleSeverity.BLOCKING
        assert evaluation.message == "Extreme sport coverage not available in Egypt (high risk country)"


class TestUnderwritingEngine:
    @pytest.fixture()
    def engine(self, parameters: RuleParameters) -> UnderwritingEngine:
        return UnderwritingEngine(build_default_rules(parameters))

    def test_approved(self, engine: UnderwritingEngine, context) -> None:
        result = engine.evaluate(context())
        assert result.decision is UnderwritingDecision.APPROVED
        assert result.reason is None
        assert [e.rule_name for e in result.evaluations] == [
            "AgeRule",
            "CountryRiskRule",
            "MedicalCoverageRule",
            "AdditionalRisksRule",
            "TripDurationRule",
        ]

    def test_warning_does_not_change_decision(self, engine: UnderwritingEngine, context) -> None:
        result = engine.evaluate(context(country="TR"))
        assert result.decision is UnderwritingDecision.APPROVED
        assert RuleSeverity.WARNING in {e.severity for e in result.evaluations}

    def test_review(self, engine: UnderwritingEngine, context) -> None:
        # Age 75 with 200000 coverage: both age and coverage rules ask for review
        result = engine.evaluate(context(age=75, coverage="200000"))
        assert result.decision is UnderwritingDecision.REQUIRES_MANUAL_REVIEW
        assert result.reason == "Age 75 requires manual review (threshold: 75)"

    def test_first_blocking_rule_sets_reason(self, engine: UnderwritingEngine, context) -> None:
        result = engine.evaluate(context(age=80, risks=("EXTREME_SPORT",)))
        assert result.decision is UnderwritingDecision.DECLINED
        assert result.reason == "Extreme sport coverage not available for age 80 (max age: 70)"
        assert len(result.evaluations) == 5

    def test_blocking_beats_earlier_review(self, engine: UnderwritingEngine, context) -> None:
        result = engine.evaluate(context(country="EG", days=200))
        assert result.decision is UnderwritingDecision.DECLINED
        assert result.reason.startswith("Trip duration of 200 days exceeds maximum")

    def test_raising_rule_propagates(self, parameters: RuleParameters, context) -> None:
        class BrokenRule(UnderwritingRule):
            name = "BrokenRule"
            order = 5

            def evaluate(self, context: UnderwritingContext) -> RuleEvaluation:
                raise RuntimeError("boom")

        engine = UnderwritingEngine([*build_default_rules(parameters), BrokenRule(parameters)])

        with pytest.raises(RuntimeError, match="boom"):
            engine.evaluate(context())
