"""Request validation: ordered rule registry with fail-fast on critical errors."""

from travel_quote.validation.base import FieldRule, ValidationContext, ValidationRule
from travel_quote.validation.engine import ValidationEngine
from travel_quote.validation.rules import build_default_rules

__all__ = [
    "FieldRule",
    "ValidationContext",
    "ValidationEngine",
    "ValidationRule",
    "build_default_rules",
]
