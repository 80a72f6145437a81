"""In-memory reference data store used in tests and loaded from CSV in production."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional, TypeVar

from loguru import logger

from travel_quote.reference.provider import ReferenceDataProvider
from travel_quote.schemas.reference import (
    AgeCoefficient,
    AgeRiskModifier,
    CountryProfile,
    CoverageLevel,
    DurationCoefficient,
    PromoCode,
    RiskBundle,
    RiskProfile,
)

_R = TypeVar("_R", CountryProfile, CoverageLevel, RiskProfile, PromoCode)


class InMemoryReferenceData(ReferenceDataProvider):
    """Dict/list backed :class:`ReferenceDataProvider`.

    Several versions of the same code may coexist with different validity
    ranges; lookups return the most recently started version active on the
    requested date.
    """

    def __init__(
        self,
        *,
        countries: Iterable[CountryProfile] = (),
        coverage_levels: Iterable[CoverageLevel] = (),
        risks: Iterable[RiskProfile] = (),
        promo_codes: Iterable[PromoCode] = (),
        age_coefficients: Iterable[AgeCoefficient] = (),
        duration_coefficients: Iterable[DurationCoefficient] = (),
        age_risk_modifiers: Iterable[AgeRiskModifier] = (),
        risk_bundles: Iterable[RiskBundle] = (),
        rule_parameters: Optional[dict[tuple[str, str], str]] = None,
        calculation_settings: Optional[dict[str, str]] = None,
    ) -> None:
        self._countries = _index(countries, lambda c: c.iso_code.upper())
        self._coverage_levels = _index(coverage_levels, lambda c: c.code)
        self._risks = _index(risks, lambda r: r.code.upper())
        self._promo_codes = _index(promo_codes, lambda p: p.code.upper())
        self._age_coefficients = sorted(age_coefficients, key=lambda a: a.age_from)
        self._duration_coefficients = sorted(duration_coefficients, key=lambda d: d.days_from)
        self._age_risk_modifiers = list(age_risk_modifiers)
        self._risk_bundles = list(risk_bundles)
        self._rule_parameters = dict(rule_parameters or {})
        self._calculation_settings = dict(calculation_settings or {})

        logger.debug(
            "Reference data ready: {c} countries, {l} coverage levels, {r} risks, {p} promo codes",
            c=len(self._countries),
            l=len(self._coverage_levels),
            r=len(self._risks),
            p=len(self._promo_codes),
        )

    # -----------------------------------------------------------------
    # Code lookups
    # -----------------------------------------------------------------

    def find_country(self, iso_code: str, on: date) -> Optional[CountryProfile]:
        return _active(self._countries.get(iso_code.upper(), []), on)

    def find_coverage_level(self, code: str, on: date) -> Optional[CoverageLevel]:
        return _active(self._coverage_levels.get(code, []), on)

    def find_risk(self, code: str, on: date) -> Optional[RiskProfile]:
        return _active(self._risks.get(code.upper(), []), on)

    def find_promo_code(self, code: str, on: date) -> Optional[PromoCode]:
        versions = self._promo_codes.get(code.upper(), [])
        return _active(versions, on) or (versions[-1] if versions else None)

    # -----------------------------------------------------------------
    # Bracket lookups
    # -----------------------------------------------------------------

    def find_age_coefficient(self, age: int, on: date) -> Optional[AgeCoefficient]:
        for row in self._age_coefficients:
            if row.age_from <= age <= row.age_to and row.is_active_on(on):
                return row
        return None

    def find_duration_coefficient(self, days: int, on: date) -> Optional[DurationCoefficient]:
        for row in self._duration_coefficients:
            if row.days_from <= days <= row.days_to and row.is_active_on(on):
                return row
        return None

    def duration_brackets(self, on: date) -> list[DurationCoefficient]:
        return [row for row in self._duration_coefficients if row.is_active_on(on)]

    def find_age_risk_modifier(self, risk_code: str, age: int, on: date) -> Optional[Decimal]:
        for row in self._age_risk_modifiers:
            if (
                row.risk_code == risk_code
                and row.age_from <= age <= row.age_to
                and row.is_active_on(on)
            ):
                return row.modifier
        return None

    def find_risk_bundles(self, on: date) -> list[RiskBundle]:
        return [bundle for bundle in self._risk_bundles if bundle.is_active_on(on)]

    # -----------------------------------------------------------------
    # Configuration lookups
    # -----------------------------------------------------------------

    def get_rule_parameter(self, rule_name: str, parameter_name: str) -> Optional[str]:
        return self._rule_parameters.get((rule_name, parameter_name))

    def get_calculation_setting(self, key: str) -> Optional[str]:
        return self._calculation_settings.get(key)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _index(records: Iterable[_R], key) -> dict[str, list[_R]]:
    """Group records by key, each group ordered by ``valid_from``."""
    grouped: dict[str, list[_R]] = {}
    for record in records:
        grouped.setdefault(key(record), []).append(record)
    for versions in grouped.values():
        versions.sort(key=lambda r: r.valid_from)
    return grouped


def _active(versions: list[_R], on: date) -> Optional[_R]:
    for record in reversed(versions):
        if record.is_active_on(on):
            return record
    return None
