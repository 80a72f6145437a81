"""Premium calculator for the MEDICAL_LEVEL and COUNTRY_DEFAULT pricing modes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from loguru import logger

from travel_quote.core.dates import age_on, trip_days
from travel_quote.core.money import ONE, ZERO, to_coefficient, to_money
from travel_quote.pricing.age import resolve_age_factor
from travel_quote.pricing.duration import duration_coefficient, weighted_days
from travel_quote.pricing.payout import apply_payout_limit
from travel_quote.reference.provider import ReferenceDataProvider
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.reference import CountryProfile, CoverageLevel, RiskProfile
from travel_quote.schemas.results import PricingMode, PricingResult, RiskPremium

AGE_COEFFICIENT_SETTING = "AGE_COEFFICIENT_ENABLED"
MEDICAL_RISK_CODE = "TRAVEL_MEDICAL"


class PremiumCalculator:
    """Derive a :class:`PricingResult` from a validated request.

    Parameters
    ----------
    reference:
        Provider for countries, coverage levels, risks and coefficient tables.
    age_coefficient_enabled:
        Default for the age-coefficient switch. The reference setting
        ``AGE_COEFFICIENT_ENABLED`` takes precedence over it, and a request's
        ``apply_age_coefficient`` over both.
    """

    def __init__(self, reference: ReferenceDataProvider, age_coefficient_enabled: bool = True) -> None:
        self.reference = reference
        self.age_coefficient_enabled = age_coefficient_enabled

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def calculate(self, request: QuoteRequest) -> PricingResult:
        """Price *request*.

        The request must already have passed validation; a reference miss
        here raises ``LookupError``.
        """
        start = request.trip_start_date
        days = trip_days(start, request.trip_end_date)
        age = age_on(request.person_birth_date, start)

        country = self.reference.find_country(request.country_iso_code, start)
        if country is None:
            raise LookupError(f"Country not found: {request.country_iso_code}")

        age_factor = resolve_age_factor(
            self.reference, age, start, enabled=self._age_coefficient_enabled(request)
        )
        age_coefficient = to_coefficient(age_factor.coefficient)
        priced_days = weighted_days(self.reference, days, start)
        reported_duration = duration_coefficient(self.reference, days, start)
        risks = self._resolve_risks(request, start)

        if request.use_country_default:
            mode = PricingMode.COUNTRY_DEFAULT
            if country.default_day_premium is None:
                raise LookupError(f"Country {country.iso_code} has no default day premium")
            base_rate = country.default_day_premium
            country_coefficient = ONE
            currency = country.default_day_premium_currency or "EUR"
            level: Optional[CoverageLevel] = None
        else:
            mode = PricingMode.MEDICAL_LEVEL
            level = self.reference.find_coverage_level(request.coverage_level_code, start)
            if level is None:
                raise LookupError(f"Coverage level not found: {request.coverage_level_code}")
            base_rate = level.daily_rate
            country_coefficient = to_coefficient(country.risk_coefficient)
            currency = level.currency

        risk_lines, risk_sum = self._risk_breakdown(
            risks, age, start, base_rate * age_coefficient * country_coefficient * priced_days
        )
        total_coefficient = to_coefficient(
            age_coefficient * country_coefficient * reported_duration * (ONE + risk_sum)
        )
        raw_premium = to_money(
            base_rate * age_coefficient * country_coefficient * (ONE + risk_sum) * priced_days
        )

        logger.debug(
            "Pricing {mode}: rate={rate} age={age}({ac}) country={cc} duration={dc} risks={rs} days={d}",
            mode=mode.value,
            rate=base_rate,
            age=age,
            ac=age_coefficient,
            cc=country_coefficient,
            dc=reported_duration,
            rs=risk_sum,
            d=days,
        )

        common = dict(
            pricing_mode=mode,
            base_rate=base_rate,
            currency=currency,
            age=age,
            age_group=age_factor.description,
            age_coefficient=age_coefficient,
            country_coefficient=country_coefficient,
            duration_coefficient=reported_duration,
            additional_risk_coefficient=risk_sum,
            total_coefficient=total_coefficient,
            days=days,
            risk_premiums=tuple(risk_lines),
        )

        if level is None:
            formula = _formula(
                base_rate, age_coefficient, None, reported_duration, risk_sum, days, raw_premium
            )
            result = PricingResult(
                premium=raw_premium,
                formula=formula,
                default_day_premium=country.default_day_premium,
                **common,
            )
        else:
            adjustment = apply_payout_limit(raw_premium, level)
            formula = _formula(
                base_rate,
                age_coefficient,
                country_coefficient,
                reported_duration,
                risk_sum,
                days,
                raw_premium,
            )
            if adjustment.applied:
                formula += f" × ({adjustment.applied_limit} / {level.coverage_amount}) = {adjustment.premium}"
            result = PricingResult(
                premium=adjustment.premium,
                formula=formula,
                coverage_level_code=level.code,
                coverage_amount=level.coverage_amount,
                uncapped_premium=raw_premium,
                applied_payout_limit=adjustment.applied_limit,
                payout_limit_applied=adjustment.applied,
                **common,
            )

        logger.info(
            "Premium calculated: {premium} {currency} ({mode}, {days} days, {country})",
            premium=result.premium,
            currency=currency,
            mode=mode.value,
            days=days,
            country=_country_label(country),
        )
        return result

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _age_coefficient_enabled(self, request: QuoteRequest) -> bool:
        if request.apply_age_coefficient is not None:
            return request.apply_age_coefficient
        setting = self.reference.get_calculation_setting(AGE_COEFFICIENT_SETTING)
        if setting is not None:
            return setting.strip().lower() in ("true", "1", "yes")
        return self.age_coefficient_enabled

    def _resolve_risks(self, request: QuoteRequest, on: date) -> list[RiskProfile]:
        """The mandatory medical risk followed by the selected optional risks."""
        risks: list[RiskProfile] = []
        medical = self.reference.find_risk(MEDICAL_RISK_CODE, on)
        if medical is not None:
            risks.append(medical)
        seen: set[str] = set()
        for code in request.risk_codes():
            risk = self.reference.find_risk(code, on)
            if risk is None:
                raise LookupError(f"Risk not found: {code}")
            if not risk.mandatory and risk.code not in seen:
                seen.add(risk.code)
                risks.append(risk)
        return risks

    def _risk_breakdown(
        self, risks: list[RiskProfile], age: int, on: date, base: Decimal
    ) -> tuple[list[RiskPremium], Decimal]:
        """Per-risk premium lines and the summed optional-risk coefficient."""
        lines: list[RiskPremium] = []
        total = ZERO
        for risk in risks:
            if risk.mandatory:
                lines.append(
                    RiskPremium(
                        risk_code=risk.code,
                        risk_name=risk.name,
                        premium=to_money(base),
                        coefficient=ZERO,
                        age_modifier=ONE,
                    )
                )
                continue

            modifier = self.reference.find_age_risk_modifier(risk.code, age, on) or ONE
            effective = to_coefficient(risk.coefficient * modifier)
            total += effective
            lines.append(
                RiskPremium(
                    risk_code=risk.code,
                    risk_name=risk.name,
                    premium=to_money(base * effective),
                    coefficient=to_coefficient(risk.coefficient),
                    age_modifier=to_coefficient(modifier),
                )
            )
        return lines, to_coefficient(total)


def _formula(
    rate: Decimal,
    age: Decimal,
    country: Optional[Decimal],
    duration: Decimal,
    risks: Decimal,
    days: int,
    premium: Decimal,
) -> str:
    parts = [str(rate), str(age)]
    if country is not None:
        parts.append(str(country))
    parts += [str(duration), f"(1 + {risks})", f"{days} days"]
    return " × ".join(parts) + f" = {premium}"


def _country_label(country: CountryProfile) -> str:
    return f"{country.iso_code} {country.risk_group.value}"
