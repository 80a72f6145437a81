"""Ordered, fail-fast execution of validation rules."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from travel_quote.schemas.quote import QuoteRequest
from travel_quote.schemas.results import IssueSeverity, ValidationIssue, ValidationOutcome
from travel_quote.validation.base import ValidationContext, ValidationRule


class ValidationEngine:
    """Run rules in ascending order and collect their findings.

    Rules are sorted once, at construction. Execution stops as soon as a
    rule flagged ``critical`` reports something, or any rule reports a
    CRITICAL finding; the outcome then holds that single finding only.
    Everything else accumulates.
    """

    def __init__(self, rules: Iterable[ValidationRule]) -> None:
        self.rules: list[ValidationRule] = sorted(rules, key=lambda rule: rule.order)
        if not self.rules:
            raise ValueError("ValidationEngine needs at least one rule")
        logger.debug("Validation engine ready with {n} rules", n=len(self.rules))

    def validate(self, request: QuoteRequest, context: ValidationContext) -> ValidationOutcome:
        issues: list[ValidationIssue] = []

        for rule in self.rules:
            try:
                found = rule.validate(request, context)
            except Exception as exc:
                logger.error("Validation rule {rule} raised: {err}", rule=rule.name, err=exc)
                return ValidationOutcome(
                    issues=(
                        ValidationIssue(
                            field="validation.error",
                            message=f"Validation rule failed: {rule.name}",
                            severity=IssueSeverity.CRITICAL,
                            code="validation.error",
                        ),
                    )
                )

            if not found:
                continue

            critical = next((i for i in found if i.severity is IssueSeverity.CRITICAL), None)
            if rule.critical or critical is not None:
                halting = critical or found[0]
                logger.info(
                    "Validation halted by {rule}: {msg}",
                    rule=rule.name,
                    msg=halting.message,
                )
                return ValidationOutcome(issues=(halting,))

            issues.extend(found)

        if issues:
            logger.info(
                "Validation finished with {n} finding(s): {fields}",
                n=len(issues),
                fields=[i.field for i in issues],
            )
        return ValidationOutcome(issues=tuple(issues))
