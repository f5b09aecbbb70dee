"""Rule, subgroup and group evaluation.

Verdicts are integers: ``0`` passed, ``1`` failed. Subgroups fold their rule
verdicts left to right with their ``intra_operator``; groups fold subgroup
verdicts with the ``inter_operator`` of each subgroup being folded in (the
first subgroup's operator is never read)::

    verdicts  [0, 1, 0]
    operators [-, AND, OR]
    combine(combine(0, 1, AND), 0, OR) == 0
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from rulegate.engine.context import EvaluationContext, GroupOutcome, SubgroupOutcome
from rulegate.engine.extractor import ValueExtractor
from rulegate.engine.registry import CheckRegistry
from rulegate.exceptions import CheckInvocationError, ExtractionError
from rulegate.models import (
    InvalidConversion,
    LogicalOperator,
    Rule,
    RuleExecutionResult,
    RuleGroup,
    RuleObject,
    RuleSubGroup,
    Verdict,
)

log = logging.getLogger(__name__)

EMPTY_SUBGROUP = "()"


# ── Combinators ─────────────────────────────────────────────────────


def combine(a: Verdict, b: Verdict, op: LogicalOperator) -> Verdict:
    """AND passes iff both passed; OR passes iff at least one passed."""
    if op == LogicalOperator.AND:
        return Verdict.of(a == Verdict.PASSED and b == Verdict.PASSED)
    return Verdict.of(a == Verdict.PASSED or b == Verdict.PASSED)


def fold(verdicts: Sequence[Verdict], operators: Sequence[LogicalOperator]) -> Verdict:
    """Left-fold ``verdicts``; ``operators[i]`` joins ``verdicts[i]`` to the accumulator.

    ``operators[0]`` is ignored. An empty sequence passes.
    """
    if not verdicts:
        return Verdict.PASSED
    acc = Verdict(verdicts[0])
    for verdict, op in zip(verdicts[1:], operators[1:]):
        acc = combine(acc, verdict, op)
    return acc


def _chain(terms: Sequence[str], operators: Sequence[LogicalOperator]) -> str:
    if not terms:
        return ""
    expr = terms[0]
    for term, op in zip(terms[1:], operators[1:]):
        expr = f"({expr} {op.value} {term})"
    return expr


def subgroup_logic(subgroup: RuleSubGroup) -> str:
    """Rule ids of ``subgroup`` chained with its intra operator.

    A subgroup without rules (which always passes) is rendered as ``()``.
    """
    ids = [rule.id for rule in subgroup.rules]
    return _chain(ids, [subgroup.intra_operator] * len(ids)) or EMPTY_SUBGROUP


def rule_logic(group: RuleGroup) -> str:
    """Human-readable expression of how the group's verdict is computed.

    ``sg0`` is rendered bare, each later subgroup wraps the accumulated
    expression: ``((sg0 and sg1) or sg2)``.
    """
    terms = [subgroup_logic(sg) for sg in group.subgroups]
    return _chain(terms, [sg.inter_operator for sg in group.subgroups])


# ── Evaluation ──────────────────────────────────────────────────────


class RuleEvaluator:
    """Evaluates rules, subgroups and groups against one target object."""

    def __init__(self, extractor: ValueExtractor, checks: CheckRegistry) -> None:
        self._extractor = extractor
        self._checks = checks

    def capture_operands(self, rule: Rule, target: Any) -> tuple[Any, Any, bool]:
        """Extract the rule's operands.

        Returns ``(operand1, operand2, ok)``. When ``ok`` is False at least one
        operand could not be extracted; its slot holds ``None`` or an
        ``InvalidConversion`` marker.
        """
        ok = True
        operand1: Any = None
        operand2: Any = None
        if rule.objects:
            operand1, ok = self._extract(rule, rule.objects[0], target)
        else:
            log.warning("Rule %s has no rule objects", rule.id)
            ok = False
        if rule.expected is not None:
            operand2 = rule.expected.typed_value
        elif len(rule.objects) > 1:
            operand2, second_ok = self._extract(rule, rule.objects[1], target)
            ok = ok and second_ok
        return operand1, operand2, ok

    def _extract(self, rule: Rule, rule_object: RuleObject, target: Any) -> tuple[Any, bool]:
        try:
            return self._extractor.extract(target, rule_object), True
        except ExtractionError as exc:
            log.warning("Rule %s: cannot extract %s: %s", rule.id, rule_object.accessor, exc)
            if exc.value_type is not None:
                return InvalidConversion(rule_object.value_type), False
            return None, False

    def run_rule(
        self,
        rule: Rule,
        target: Any,
        *,
        group_id: str = "",
        subgroup_id: str = "",
        object_label: str = "",
        timestamp: str = "",
    ) -> RuleExecutionResult:
        """Evaluate one rule. Extraction or check failures yield a failed verdict."""
        operand1, operand2, ok = self.capture_operands(rule, target)
        verdict = Verdict.FAILED
        if ok:
            args: list[Any] = [operand1]
            if rule.expected is not None or len(rule.objects) > 1:
                args.append(operand2)
            args.extend(p.typed_value for p in rule.parameters)
            try:
                verdict = Verdict.of(self._checks.invoke(rule.check, *args))
            except CheckInvocationError as exc:
                log.warning("Rule %s: check %s failed: %s", rule.id, rule.check, exc)

        log.debug("Rule %s/%s/%s -> %d", group_id, subgroup_id, rule.id, verdict)
        return RuleExecutionResult(
            timestamp=timestamp,
            rule=rule,
            object_label=object_label,
            group_id=group_id,
            subgroup_id=subgroup_id,
            verdict=verdict,
            operand1=operand1,
            operand2=operand2,
        )

    def run_subgroup(
        self,
        subgroup: RuleSubGroup,
        target: Any,
        context: EvaluationContext,
        *,
        group_id: str,
        preserve: bool = True,
    ) -> SubgroupOutcome:
        """Run every rule (no short-circuit) and fold with the intra operator."""
        verdicts: list[Verdict] = []
        for rule in subgroup.rules:
            result = self.run_rule(
                rule,
                target,
                group_id=group_id,
                subgroup_id=subgroup.id,
                object_label=context.object_label,
                timestamp=context.timestamp,
            )
            context.record_result(result, preserve=preserve)
            verdicts.append(result.verdict)
        failed = verdicts.count(Verdict.FAILED)
        outcome = SubgroupOutcome(
            subgroup_id=subgroup.id,
            verdict=fold(verdicts, [subgroup.intra_operator] * len(verdicts)),
            rules_run=len(verdicts),
            rules_passed=len(verdicts) - failed,
            rules_failed=failed,
        )
        context.subgroup_outcomes[(group_id, subgroup.id)] = outcome
        return outcome

    def run_group(
        self,
        group: RuleGroup,
        target: Any,
        context: EvaluationContext,
        *,
        preserve: bool = True,
    ) -> GroupOutcome:
        """Evaluate all subgroups of ``group`` and fold their verdicts.

        Gates (validity, dependency) are the caller's concern.
        """
        collection = context.collection
        before = (collection.rules_run, collection.rules_passed, collection.rules_failed)

        subgroups = [
            self.run_subgroup(sg, target, context, group_id=group.id, preserve=preserve)
            for sg in group.subgroups
        ]
        verdict = fold(
            [s.verdict for s in subgroups], [sg.inter_operator for sg in group.subgroups]
        )

        return GroupOutcome(
            group_id=group.id,
            verdict=verdict,
            rules_run=collection.rules_run - before[0],
            rules_passed=collection.rules_passed - before[1],
            rules_failed=collection.rules_failed - before[2],
            rule_logic=rule_logic(group),
            subgroups=subgroups,
        )
