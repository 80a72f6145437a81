"""Abstract reference-data provider consumed by every quote stage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from travel_quote.schemas.reference import (
    AgeCoefficient,
    CountryProfile,
    CoverageLevel,
    DurationCoefficient,
    PromoCode,
    RiskBundle,
    RiskProfile,
)


class ReferenceDataProvider(ABC):
    """Point lookups against read-only reference tables.

    Every lookup returns the matching record active on *on*, or ``None``
    when nothing matches. Callers turn ``None`` into validation findings or
    fallbacks; a provider never raises for a plain miss.
    """

    @abstractmethod
    def find_country(self, iso_code: str, on: date) -> Optional[CountryProfile]: ...

    @abstractmethod
    def find_coverage_level(self, code: str, on: date) -> Optional[CoverageLevel]: ...

    @abstractmethod
    def find_risk(self, code: str, on: date) -> Optional[RiskProfile]: ...

    @abstractmethod
    def find_promo_code(self, code: str, on: date) -> Optional[PromoCode]:
        """Return the promo code regardless of its validity window.

        The discount engine checks the window itself so it can log why a
        code was ignored.
        """

    @abstractmethod
    def find_age_coefficient(self, age: int, on: date) -> Optional[AgeCoefficient]: ...

    @abstractmethod
    def find_duration_coefficient(self, days: int, on: date) -> Optional[DurationCoefficient]: ...

    @abstractmethod
    def duration_brackets(self, on: date) -> list[DurationCoefficient]:
        """All duration brackets active on *on*, ordered by ``days_from``."""

    @abstractmethod
    def find_age_risk_modifier(self, risk_code: str, age: int, on: date) -> Optional[Decimal]: ...

    @abstractmethod
    def find_risk_bundles(self, on: date) -> list[RiskBundle]: ...

    @abstractmethod
    def get_rule_parameter(self, rule_name: str, parameter_name: str) -> Optional[str]: ...

    @abstractmethod
    def get_calculation_setting(self, key: str) -> Optional[str]: ...
