"""Underwriting: ordered business rules reduced to APPROVED / DECLINED / REVIEW."""

from travel_quote.underwriting.config import RuleParameters
from travel_quote.underwriting.engine import UnderwritingEngine
from travel_quote.underwriting.rules import UnderwritingContext, UnderwritingRule, build_default_rules

__all__ = [
    "RuleParameters",
    "UnderwritingContext",
    "UnderwritingEngine",
    "UnderwritingRule",
    "build_default_rules",
]
