"""Shared fixtures for the travel quote test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from omegaconf import OmegaConf

from travel_quote.reference.cache import ParameterCache
from travel_quote.reference.memory import InMemoryReferenceData
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
from travel_quote.schemas.results import QuoteOutcome, QuoteStatus

TODAY = date(2027, 1, 15)
SINCE = date(2020, 1, 1)
DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "reference"


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


def _country(iso: str, name: str, group: RiskGroup, coefficient: str, default: str | None) -> CountryProfile:
    return CountryProfile(
        iso_code=iso,
        name=name,
        risk_group=group,
        risk_coefficient=Decimal(coefficient),
        default_day_premium=Decimal(default) if default else None,
        default_day_premium_currency="EUR" if default else None,
        valid_from=SINCE,
    )


def _level(code: str, rate: str, max_payout: str | None = None) -> CoverageLevel:
    return CoverageLevel(
        code=code,
        coverage_amount=Decimal(code),
        daily_rate=Decimal(rate),
        max_payout_amount=Decimal(max_payout) if max_payout else None,
        valid_from=SINCE,
    )


def _risk(code: str, coefficient: str, mandatory: bool = False) -> RiskProfile:
    return RiskProfile(
        code=code,
        name=code.replace("_", " ").title(),
        coefficient=Decimal(coefficient),
        mandatory=mandatory,
        valid_from=SINCE,
    )


def _promo(code: str, kind: PromoDiscountKind, value: str, **kwargs: Any) -> PromoCode:
    kwargs.setdefault("valid_from", SINCE)
    return PromoCode(code=code, discount_kind=kind, discount_value=Decimal(value), **kwargs)


@pytest.fixture()
def reference() -> InMemoryReferenceData:
    """A small, fully populated reference snapshot."""
    ages = [
        (0, 5, "1.1", "Infants and toddlers"),
        (6, 17, "0.9", "Children and teenagers"),
        (18, 30, "1.0", "Young adults"),
        (31, 40, "1.1", "Adults"),
        (41, 50, "1.3", "Middle-aged"),
        (51, 60, "1.6", "Senior"),
        (61, 70, "2.0", "Elderly"),
        (71, 80, "2.5", "Very elderly"),
    ]
    durations = [
        (0, 10, "1.00"),
        (11, 30, "0.95"),
        (31, 60, "0.90"),
        (61, 90, "0.85"),
        (91, 180, "0.80"),
        (181, 365, "0.75"),
    ]
    return InMemoryReferenceData(
        countries=[
            _country("ES", "Spain", RiskGroup.LOW, "1.0", "2.50"),
            _country("IS", "Iceland", RiskGroup.LOW, "1.0", None),
            _country("TR", "Turkey", RiskGroup.MEDIUM, "1.3", "3.25"),
            _country("EG", "Egypt", RiskGroup.HIGH, "1.8", "4.50"),
            _country("AF", "Afghanistan", RiskGroup.VERY_HIGH, "2.5", "6.25"),
        ],
        coverage_levels=[
            _level("10000", "2.00"),
            _level("50000", "4.50"),
            _level("100000", "7.00"),
            _level("200000", "12.00"),
            _level("500000", "20.00", max_payout="300000"),
        ],
        risks=[
            _risk("TRAVEL_MEDICAL", "0", mandatory=True),
            _risk("SPORT_ACTIVITIES", "0.30"),
            _risk("EXTREME_SPORT", "0.60"),
            _risk("ACCIDENT_COVERAGE", "0.20"),
            _risk("TRIP_CANCELLATION", "0.15"),
            _risk("LUGGAGE_LOSS", "0.10"),
            _risk("FLIGHT_DELAY", "0.05"),
        ],
        promo_codes=[
            _promo("WELCOME10", PromoDiscountKind.PERCENTAGE, "10", description="Welcome discount"),
            _promo("FIXED20", PromoDiscountKind.FIXED_AMOUNT, "20", min_premium_amount=Decimal("50")),
            _promo("BIGSPENDER", PromoDiscountKind.PERCENTAGE, "15", min_premium_amount=Decimal("150")),
            _promo("HUGE", PromoDiscountKind.FIXED_AMOUNT, "1000"),
            _promo(
                "EXPIRED",
                PromoDiscountKind.PERCENTAGE,
                "10",
                valid_from=date(2020, 1, 1),
                valid_to=date(2020, 12, 31),
            ),
            _promo("INACTIVE", PromoDiscountKind.PERCENTAGE, "10", active=False),
            _promo(
                "USEDUP",
                PromoDiscountKind.PERCENTAGE,
                "10",
                max_usage_count=10,
                current_usage_count=10,
            ),
        ],
        age_coefficients=[
            AgeCoefficient(age_from=a, age_to=b, coefficient=Decimal(c), description=d, valid_from=SINCE)
            for a, b, c, d in ages
        ],
        duration_coefficients=[
            DurationCoefficient(days_from=a, days_to=b, coefficient=Decimal(c), valid_from=SINCE)
            for a, b, c in durations
        ],
        age_risk_modifiers=[
            AgeRiskModifier(
                risk_code="SPORT_ACTIVITIES",
                age_from=51,
                age_to=60,
                modifier=Decimal("1.2"),
                valid_from=SINCE,
            ),
        ],
        risk_bundles=[
            RiskBundle(
                code="ACTIVE_TRAVELLER",
                name="Active traveller bundle",
                discount_percentage=Decimal("10"),
                required_risks=("SPORT_ACTIVITIES", "ACCIDENT_COVERAGE"),
                valid_from=SINCE,
            ),
            RiskBundle(
                code="WORRY_FREE",
                name="Worry-free bundle",
                discount_percentage=Decimal("15"),
                required_risks=("TRIP_CANCELLATION", "LUGGAGE_LOSS", "FLIGHT_DELAY"),
                valid_from=SINCE,
            ),
        ],
    )


# ---------------------------------------------------------------------------
# QuoteRequest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def valid_request() -> QuoteRequest:
    """Age 35 on departure, Spain, 14 days, coverage level 50000, no extras."""
    return QuoteRequest(
        person_first_name="Jane",
        person_last_name="Doe",
        person_birth_date=date(1991, 5, 10),
        trip_start_date=date(2027, 3, 1),
        trip_end_date=date(2027, 3, 15),
        country_iso_code="ES",
        coverage_level_code="50000",
    )


@pytest.fixture()
def make_request(valid_request: QuoteRequest) -> Callable[..., QuoteRequest]:
    """Return a builder that copies *valid_request* with field overrides."""

    def _make(**overrides: Any) -> QuoteRequest:
        return valid_request.model_copy(update=overrides)

    return _make


# ---------------------------------------------------------------------------
# Hydra config fixture (test overrides)
# ---------------------------------------------------------------------------


@pytest.fixture()
def test_cfg() -> Any:
    """Return a minimal OmegaConf DictConfig with test overrides."""
    cfg_dict = {
        "reference": {"data_dir": str(DATA_DIR)},
        "validation": {
            "max_age": 80,
            "max_trip_days": 365,
            "supported_currencies": ["EUR", "USD", "GBP", "CHF", "JPY"],
        },
        "pricing": {"age_coefficient_enabled": True},
        "discounts": {
            "group_tiers": [
                {"code": "GROUP_5", "min_persons": 5, "percentage": 10},
                {"code": "GROUP_10", "min_persons": 10, "percentage": 15},
                {"code": "GROUP_20", "min_persons": 20, "percentage": 20},
            ],
            "corporate_percentage": 20,
            "corporate_min_premium": 100,
        },
        "logging": {
            "level": "WARNING",
            "colored": False,
            "format": "pretty",
        },
        "server": {
            "host": "127.0.0.1",
            "port": 8000,
            "debug": False,
            "cors_origins": ["http://localhost:3000"],
        },
    }
    return OmegaConf.create(cfg_dict)


@pytest.fixture()
def pipeline(test_cfg: Any, reference: InMemoryReferenceData) -> Any:
    from travel_quote.pipelines.quote_pipeline import QuotePipeline

    return QuotePipeline(test_cfg, reference, ParameterCache())


# ---------------------------------------------------------------------------
# Mock pipeline
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_pipeline() -> MagicMock:
    """Return a MagicMock whose ``calculate`` returns a bare SUCCESS outcome."""
    mock = MagicMock()
    mock.calculate.return_value = QuoteOutcome(status=QuoteStatus.SUCCESS)
    return mock


@pytest.fixture()
def today() -> date:
    """The fixed quote date used throughout the suite."""
    return TODAY
