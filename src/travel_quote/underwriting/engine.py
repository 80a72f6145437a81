"""Underwriting engine: run every rule, then derive the decision."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from travel_quote.schemas.results import (
    RuleEvaluation,
    RuleSeverity,
    UnderwritingDecision,
    UnderwritingResult,
)
from travel_quote.underwriting.rules import UnderwritingContext, UnderwritingRule


class UnderwritingEngine:
    """Evaluate ordered rules and reduce their severities to a decision.

    All rules always run so the trace is complete. The first BLOCKING
    evaluation fixes a DECLINED decision; otherwise the first
    REVIEW_REQUIRED evaluation fixes REQUIRES_MANUAL_REVIEW. WARNING
    evaluations are informational. A rule that raises is not turned into
    an evaluation; the exception propagates to the caller.
    """

    def __init__(self, rules: Iterable[UnderwritingRule]) -> None:
        self.rules: list[UnderwritingRule] = sorted(rules, key=lambda rule: rule.order)

    def evaluate(self, context: UnderwritingContext) -> UnderwritingResult:
        evaluations: list[RuleEvaluation] = []
        for rule in self.rules:
            evaluation = rule.evaluate(context)
            logger.debug(
                "Rule {rule}: {severity} {msg}",
                rule=evaluation.rule_name,
                severity=evaluation.severity.value,
                msg=evaluation.message,
            )
            evaluations.append(evaluation)

        result = _decide(evaluations)
        logger.info(
            "Underwriting decision: {decision}{reason}",
            decision=result.decision.value,
            reason=f" ({result.reason})" if result.reason else "",
        )
        return result


def _decide(evaluations: list[RuleEvaluation]) -> UnderwritingResult:
    trace = tuple(evaluations)
    for severity, decision in (
        (RuleSeverity.BLOCKING, UnderwritingDecision.DECLINED),
        (RuleSeverity.REVIEW_REQUIRED, UnderwritingDecision.REQUIRES_MANUAL_REVIEW),
    ):
        first = next((e for e in evaluations if e.severity is severity), None)
        if first is not None:
            return UnderwritingResult(decision=decision, reason=first.message, evaluations=trace)
    return UnderwritingResult(decision=UnderwritingDecision.APPROVED, evaluations=trace)
