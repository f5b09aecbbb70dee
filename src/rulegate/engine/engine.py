"""Rule engine: evaluates every active rule group of a backend against target objects."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from rulegate.core.config import EngineConfig
from rulegate.engine.actions import ActionExecutor
from rulegate.engine.context import EngineReport, EvaluationContext, GroupOutcome
from rulegate.engine.evaluator import RuleEvaluator, rule_logic
from rulegate.engine.extractor import AccessorRegistry, ValueExtractor, get_field_value
from rulegate.engine.registry import ActionRegistry, CheckRegistry
from rulegate.engine.validity import is_group_active
from rulegate.exceptions import ValidityParseError
from rulegate.models import ExecuteIf, OutputType, RuleGroup, Verdict

if TYPE_CHECKING:
    from rulegate.backends.protocol import IRulesBackend

log = logging.getLogger(__name__)


def dependency_met(stored: Verdict | None, execute_if: ExecuteIf) -> bool:
    """Whether a dependent group may run given its dependency's stored verdict."""
    if stored is None:
        return False
    if execute_if == ExecuteIf.ALWAYS:
        return True
    if execute_if == ExecuteIf.PASSED:
        return stored == Verdict.PASSED
    return stored == Verdict.FAILED


class RuleEngine:
    """Evaluates rule groups from a backend against one object at a time.

    The rule tree is never mutated; each :meth:`run` call gets a fresh
    :class:`EvaluationContext`, so one engine can process many objects.
    Group evaluation is pure computation. Extraction, check and action
    failures are turned into failed verdicts or failed-action counts and
    never abort a pass.
    """

    def __init__(
        self,
        backend: IRulesBackend,
        *,
        checks: CheckRegistry | None = None,
        actions: ActionRegistry | None = None,
        accessors: AccessorRegistry | None = None,
        config: EngineConfig | None = None,
        active_only: bool = True,
    ) -> None:
        if checks is None:
            from rulegate.checks import default_check_registry

            checks = default_check_registry()
        if actions is None:
            from rulegate.actions import default_action_registry

            actions = default_action_registry()

        self._backend = backend
        self._config = config or EngineConfig()
        self._active_only = active_only
        self._checks = checks
        self._actions = actions
        self._extractor = ValueExtractor(accessors)
        self._evaluator = RuleEvaluator(self._extractor, checks)
        self._executor = ActionExecutor(self._extractor, actions)

    @property
    def checks(self) -> CheckRegistry:
        return self._checks

    @property
    def actions(self) -> ActionRegistry:
        return self._actions

    @property
    def evaluator(self) -> RuleEvaluator:
        return self._evaluator

    def groups(self, today: date | None = None) -> list[RuleGroup]:
        """Groups of the backend in declaration order."""
        return self._backend.list_groups(active_only=self._active_only, today=today)

    def run(
        self,
        target: Any,
        *,
        object_label: str | None = None,
        today: date | None = None,
    ) -> EngineReport:
        """Evaluate every active group against ``target`` and return a report."""
        today = today or date.today()
        label = object_label if object_label is not None else self._label_of(target)
        context = EvaluationContext(
            object_label=label,
            timestamp=datetime.now().strftime(self._config.timestamp_format),
            output_type=OutputType(self._config.output_type),
        )

        for group in self.groups(today):
            if self._active_only and not self._within_window(group, today):
                continue
            if group.dependent_group_id and not self._dependency_allows(group, context):
                continue
            self._run_group(group, target, context)

        report = context.to_report()
        log.info(
            "Evaluated %d group(s) for %r: %d failed, %d skipped, %d rule(s) run",
            report.groups_evaluated,
            label,
            report.groups_failed,
            report.groups_skipped,
            report.collection.rules_run,
        )
        return report

    def run_many(self, targets: Iterable[Any], *, today: date | None = None) -> list[EngineReport]:
        return [self.run(target, today=today) for target in targets]

    # ── Internals ───────────────────────────────────────────────────

    def _run_group(self, group: RuleGroup, target: Any, context: EvaluationContext) -> None:
        preserve = group.preserve_results and self._config.preserve_results
        outcome = self._evaluator.run_group(group, target, context, preserve=preserve)
        assert outcome.verdict is not None

        if group.actions:
            outcome.actions_executed, outcome.actions_failed = self._executor.run_actions(
                group, outcome.verdict, target
            )
            if group.output_after_actions and preserve:
                self._recapture_operands(group, target, context)

        context.record_outcome(outcome)
        log.debug("Group %s -> %d (%s)", group.id, outcome.verdict, outcome.rule_logic)

    def _recapture_operands(self, group: RuleGroup, target: Any, context: EvaluationContext) -> None:
        """Refresh stored operand values so messages show post-action state."""
        collection = context.collection
        for result in collection.for_group(group.id):
            operand1, operand2, _ = self._evaluator.capture_operands(result.rule, target)
            collection.replace(
                result, dataclasses.replace(result, operand1=operand1, operand2=operand2)
            )

    @staticmethod
    def _within_window(group: RuleGroup, today: date) -> bool:
        try:
            return is_group_active(group, today)
        except ValidityParseError as exc:
            log.warning("Excluding group %s: %s", group.id, exc)
            return False

    @staticmethod
    def _dependency_allows(group: RuleGroup, context: EvaluationContext) -> bool:
        stored = context.verdict_of(group.dependent_group_id or "")
        if dependency_met(stored, group.dependent_execute_if):
            return True
        reason = (
            f"dependency {group.dependent_group_id} "
            f"{'not evaluated' if stored is None else f'ended with {int(stored)}'}, "
            f"requires {group.dependent_execute_if.value}"
        )
        log.warning("Skipping group %s: %s", group.id, reason)
        context.record_skip(
            GroupOutcome(
                group_id=group.id,
                skipped=True,
                skip_reason=reason,
                rule_logic=rule_logic(group),
            )
        )
        return False

    def _label_of(self, target: Any) -> str:
        field_name = self._config.object_label_field
        if not field_name:
            return ""
        try:
            value = get_field_value(target, field_name)
        except (KeyError, AttributeError):
            return ""
        return "" if value is None else str(value)
