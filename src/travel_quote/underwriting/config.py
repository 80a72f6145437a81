"""Underwriting rule parameters read through the process-wide cache."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from loguru import logger

from travel_quote.reference.cache import ParameterCache
from travel_quote.reference.provider import ReferenceDataProvider


class RuleParameters:
    """Typed access to ``(rule name, parameter name)`` settings.

    Raw values are cached on first read; an absent or unparseable value
    falls back to the caller's default.
    """

    def __init__(self, reference: ReferenceDataProvider, cache: Optional[ParameterCache] = None) -> None:
        self.reference = reference
        self.cache = cache if cache is not None else ParameterCache()

    def get_raw(self, rule_name: str, parameter_name: str) -> Optional[str]:
        return self.cache.get_or_compute(
            (rule_name, parameter_name),
            lambda: self.reference.get_rule_parameter(rule_name, parameter_name),
        )

    def get_int(self, rule_name: str, parameter_name: str, default: int) -> int:
        raw = self.get_raw(rule_name, parameter_name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning(
                "Cannot parse {rule}.{param} as int: {raw!r}, using default {default}",
                rule=rule_name,
                param=parameter_name,
                raw=raw,
                default=default,
            )
            return default

    def get_decimal(self, rule_name: str, parameter_name: str, default: Decimal) -> Decimal:
        raw = self.get_raw(rule_name, parameter_name)
        if raw is None:
            return default
        try:
            return Decimal(raw)
        except InvalidOperation:
            logger.warning(
                "Cannot parse {rule}.{param} as decimal: {raw!r}, using default {default}",
                rule=rule_name,
                param=parameter_name,
                raw=raw,
                default=default,
            )
            return default

    def get_names(self, rule_name: str, parameter_name: str, default: frozenset[str]) -> frozenset[str]:
        """A comma-separated list of names, upper-cased; blank entries are dropped."""
        raw = self.get_raw(rule_name, parameter_name)
        if raw is None:
            return default
        return frozenset(name.strip().upper() for name in raw.split(",") if name.strip())
