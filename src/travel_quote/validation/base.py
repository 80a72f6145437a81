"""Validation rule contract and the context rules run in."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from travel_quote.reference.provider import ReferenceDataProvider
from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import IssueSeverity, ValidationIssue


@dataclass
class ValidationContext:
    """Per-request state shared between rules.

    ``today`` is passed in explicitly so that validation is a pure
    function of the request, the reference data, and the date.
    Rules may stash derived values (e.g. the computed age) in
    ``attributes`` for later rules to reuse.
    """

    today: date
    reference: ReferenceDataProvider
    attributes: dict[str, Any] = field(default_factory=dict)


class ValidationRule(ABC):
    """A single ordered check over a :class:`QuoteRequest`.

    Rules run in ascending ``order``. A ``critical`` rule that reports
    anything stops the chain.
    """

    name: str = "ValidationRule"
    order: int = 100
    critical: bool = False

    @abstractmethod
    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        """Return the findings for *request*; an empty list means the rule passed."""

    # -----------------------------------------------------------------
    # Reporting helpers
    # -----------------------------------------------------------------

    @staticmethod
    def error(field_name: str, message: str, code: Optional[str] = None) -> ValidationIssue:
        return ValidationIssue(field=field_name, message=message, code=code)

    @staticmethod
    def warning(field_name: str, message: str, code: Optional[str] = None) -> ValidationIssue:
        return ValidationIssue(
            field=field_name, message=message, code=code, severity=IssueSeverity.WARNING
        )

    @staticmethod
    def critical_issue(field_name: str, message: str, code: Optional[str] = None) -> ValidationIssue:
        return ValidationIssue(
            field=field_name, message=message, code=code, severity=IssueSeverity.CRITICAL
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, order={self.order})"


class FieldRule(ValidationRule):
    """Rule over one request field, pulled out by an extractor."""

    def __init__(self, field_name: str, extractor: Optional[Callable[[QuoteRequest], Any]] = None) -> None:
        self.field_name = field_name
        self.extractor = extractor or (lambda request: getattr(request, field_name))
        self.name = f"{type(self).__name__}[{field_name}]"

    def validate(self, request: QuoteRequest, context: ValidationContext) -> list[ValidationIssue]:
        return self.check(self.extractor(request), context)

    @abstractmethod
    def check(self, value: Any, context: ValidationContext) -> list[ValidationIssue]: ...
