"""Load reference tables from a directory of CSV files.

Can be run standalone via ``python -m travel_quote.reference.loader <dir>``
to check that a set of tables parses.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger
from pydantic import BaseModel, ValidationError

from travel_quote.core.exceptions import ReferenceDataError
from travel_quote.reference.memory import InMemoryReferenceData
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

# table file name → record model
_RECORD_TABLES: dict[str, type[BaseModel]] = {
    "countries": CountryProfile,
    "coverage_levels": CoverageLevel,
    "risks": RiskProfile,
    "promo_codes": PromoCode,
    "age_coefficients": AgeCoefficient,
    "duration_coefficients": DurationCoefficient,
    "age_risk_modifiers": AgeRiskModifier,
    "risk_bundles": RiskBundle,
}

# Tables that may be absent; everything else is required.
_OPTIONAL_TABLES = {
    "promo_codes",
    "age_risk_modifiers",
    "risk_bundles",
    "underwriting_parameters",
    "calculation_settings",
}


def load_reference_data(data_dir: str) -> InMemoryReferenceData:
    """Read every reference table under *data_dir* into memory.

    Parameters
    ----------
    data_dir:
        Directory holding ``countries.csv``, ``coverage_levels.csv``,
        ``risks.csv``, ``age_coefficients.csv``, ``duration_coefficients.csv``
        and, optionally, ``promo_codes.csv``, ``age_risk_modifiers.csv``,
        ``risk_bundles.csv``, ``underwriting_parameters.csv`` and
        ``calculation_settings.csv``.

    Returns
    -------
    InMemoryReferenceData
        A provider serving point lookups over the loaded rows.

    Raises
    ------
    ReferenceDataError
        If the directory or a required table is missing, or a row fails
        model validation.
    """
    directory = Path(data_dir)
    if not directory.is_dir():
        msg = f"Reference data directory not found: {data_dir}"
        logger.error(msg)
        raise ReferenceDataError(msg)

    tables: dict[str, list[Any]] = {}
    for name, model in _RECORD_TABLES.items():
        rows = _read_table(directory, name)
        tables[name] = [_parse_row(name, model, row) for row in rows]

    rule_parameters = {
        (row["rule_name"], row["parameter_name"]): row["parameter_value"]
        for row in _read_table(directory, "underwriting_parameters")
    }
    calculation_settings = {
        row["key"]: row["value"] for row in _read_table(directory, "calculation_settings")
    }

    logger.info(
        "Loaded reference data from {dir}: {n} countries, {m} coverage levels, {r} risks",
        dir=str(directory),
        n=len(tables["countries"]),
        m=len(tables["coverage_levels"]),
        r=len(tables["risks"]),
    )
    return InMemoryReferenceData(
        countries=tables["countries"],
        coverage_levels=tables["coverage_levels"],
        risks=tables["risks"],
        promo_codes=tables["promo_codes"],
        age_coefficients=tables["age_coefficients"],
        duration_coefficients=tables["duration_coefficients"],
        age_risk_modifiers=tables["age_risk_modifiers"],
        risk_bundles=tables["risk_bundles"],
        rule_parameters=rule_parameters,
        calculation_settings=calculation_settings,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_table(directory: Path, name: str) -> list[dict[str, str]]:
    """Read ``<name>.csv`` as strings, dropping empty cells."""
    csv_file = directory / f"{name}.csv"
    if not csv_file.exists():
        if name in _OPTIONAL_TABLES:
            logger.debug("Optional reference table {name} not present", name=name)
            return []
        msg = f"Reference table not found: {csv_file}"
        logger.error(msg)
        raise ReferenceDataError(msg)

    # Keep every cell as text; Decimal parsing happens in the pydantic models.
    df = pd.read_csv(csv_file, dtype=str, keep_default_na=False)
    logger.debug("Read {name}.csv ({n} rows)", name=name, n=len(df))

    rows: list[dict[str, str]] = []
    for record in df.to_dict(orient="records"):
        rows.append({k: str(v).strip() for k, v in record.items() if str(v).strip() != ""})
    return rows


def _parse_row(table: str, model: type[BaseModel], row: dict[str, str]) -> Any:
    if model is RiskBundle and "required_risks" in row:
        row = {**row, "required_risks": tuple(r.strip() for r in row["required_risks"].split("|"))}
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        msg = f"Malformed row in {table}.csv: {row} ({exc.error_count()} errors)"
        logger.error(msg)
        raise ReferenceDataError(msg) from exc


# ---------------------------------------------------------------------------
# CLI entry point (``python -m travel_quote.reference.loader``)
# ---------------------------------------------------------------------------


def _cli() -> None:
    import sys

    data_dir = sys.argv[1] if len(sys.argv) > 1 else "data/reference"
    load_reference_data(data_dir)


if __name__ == "__main__":
    _cli()
