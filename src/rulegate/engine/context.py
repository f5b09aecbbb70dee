"""Per-pass evaluation state and the reports built from it.

The rule tree is immutable; everything that changes while one target object
is evaluated (stored verdicts, counters, results) lives in an
``EvaluationContext`` created per ``RuleEngine.run`` call.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from rulegate.engine.renderer import MessageRenderer, format_operand
from rulegate.models import OutputType, RuleExecutionResult, Verdict


@dataclass
class RuleExecutionCollection:
    """Results of one or more passes plus aggregate counts."""

    results: list[RuleExecutionResult] = field(default_factory=list)
    rules_run: int = 0
    rules_passed: int = 0
    rules_failed: int = 0

    def add(self, result: RuleExecutionResult, *, preserve: bool = True) -> None:
        """Count ``result``; keep it only when ``preserve`` is set."""
        self.rules_run += 1
        if result.failed:
            self.rules_failed += 1
        else:
            self.rules_passed += 1
        if preserve:
            self.results.append(result)

    def replace(self, old: RuleExecutionResult, new: RuleExecutionResult) -> None:
        """Swap a stored result for a re-captured one without touching counts."""
        index = self.results.index(old)
        self.results[index] = new

    def filtered(self, output_type: OutputType = OutputType.ALL) -> list[RuleExecutionResult]:
        if output_type == OutputType.FAILED:
            return [r for r in self.results if r.failed]
        if output_type == OutputType.PASSED:
            return [r for r in self.results if not r.failed]
        return list(self.results)

    def for_group(self, group_id: str) -> list[RuleExecutionResult]:
        return [r for r in self.results if r.group_id == group_id]

    def __iter__(self) -> Iterator[RuleExecutionResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


@dataclass
class SubgroupOutcome:
    """Verdict and rule counts of one subgroup."""

    subgroup_id: str
    verdict: Verdict
    rules_run: int = 0
    rules_passed: int = 0
    rules_failed: int = 0


@dataclass
class GroupOutcome:
    """How one group fared for one target object."""

    group_id: str
    verdict: Verdict | None = None
    skipped: bool = False
    skip_reason: str = ""
    rules_run: int = 0
    rules_passed: int = 0
    rules_failed: int = 0
    actions_executed: int = 0
    actions_failed: int = 0
    rule_logic: str = ""
    subgroups: list[SubgroupOutcome] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.verdict == Verdict.PASSED


@dataclass
class EvaluationContext:
    """Mutable state of a single evaluation pass."""

    object_label: str
    timestamp: str
    collection: RuleExecutionCollection = field(default_factory=RuleExecutionCollection)
    outcomes: list[GroupOutcome] = field(default_factory=list)
    group_verdicts: dict[str, Verdict] = field(default_factory=dict)
    subgroup_outcomes: dict[tuple[str, str], SubgroupOutcome] = field(default_factory=dict)
    rule_verdicts: dict[tuple[str, str, str], Verdict] = field(default_factory=dict)
    groups_skipped: int = 0
    output_type: OutputType = OutputType.FAILED

    def verdict_of(self, group_id: str) -> Verdict | None:
        """Stored verdict of an already-evaluated group, if any."""
        return self.group_verdicts.get(group_id)

    def record_result(self, result: RuleExecutionResult, *, preserve: bool = True) -> None:
        key = (result.group_id, result.subgroup_id, result.rule_id)
        self.rule_verdicts[key] = result.verdict
        self.collection.add(result, preserve=preserve)

    def record_skip(self, outcome: GroupOutcome) -> None:
        self.groups_skipped += 1
        self.outcomes.append(outcome)

    def record_outcome(self, outcome: GroupOutcome) -> None:
        if outcome.verdict is not None:
            self.group_verdicts[outcome.group_id] = outcome.verdict
        self.outcomes.append(outcome)

    def to_report(self) -> EngineReport:
        return EngineReport(
            object_label=self.object_label,
            timestamp=self.timestamp,
            outcomes=list(self.outcomes),
            collection=self.collection,
            groups_skipped=self.groups_skipped,
            output_type=self.output_type,
        )


@dataclass
class EngineReport:
    """Aggregated result of running every active group against one object."""

    object_label: str
    timestamp: str
    outcomes: list[GroupOutcome] = field(default_factory=list)
    collection: RuleExecutionCollection = field(default_factory=RuleExecutionCollection)
    groups_skipped: int = 0
    # Results shown by messages() and to_dict() when no output type is passed
    output_type: OutputType = OutputType.FAILED

    @property
    def groups_evaluated(self) -> int:
        return sum(1 for o in self.outcomes if not o.skipped)

    @property
    def groups_failed(self) -> int:
        return sum(1 for o in self.outcomes if o.verdict == Verdict.FAILED)

    @property
    def passed(self) -> bool:
        """True when no evaluated group failed."""
        return self.groups_failed == 0

    def outcome(self, group_id: str) -> GroupOutcome:
        """Raises KeyError if the group was not part of this pass."""
        for outcome in self.outcomes:
            if outcome.group_id == group_id:
                return outcome
        raise KeyError(f"Group {group_id!r} not in report")

    def messages(
        self,
        output_type: OutputType | None = None,
        renderer: MessageRenderer | None = None,
    ) -> list[str]:
        renderer = renderer or MessageRenderer()
        results = self.collection.filtered(output_type or self.output_type)
        return [renderer.render(r) for r in results]

    def to_dict(
        self,
        output_type: OutputType | None = None,
        renderer: MessageRenderer | None = None,
    ) -> dict[str, Any]:
        """JSON-ready representation with rendered messages."""
        renderer = renderer or MessageRenderer()
        output_type = output_type or self.output_type
        return {
            "object_label": self.object_label,
            "timestamp": self.timestamp,
            "passed": self.passed,
            "groups_evaluated": self.groups_evaluated,
            "groups_failed": self.groups_failed,
            "groups_skipped": self.groups_skipped,
            "rules_run": self.collection.rules_run,
            "rules_passed": self.collection.rules_passed,
            "rules_failed": self.collection.rules_failed,
            "groups": [
                {
                    "group_id": o.group_id,
                    "verdict": None if o.verdict is None else int(o.verdict),
                    "skipped": o.skipped,
                    "skip_reason": o.skip_reason,
                    "rules_run": o.rules_run,
                    "rules_passed": o.rules_passed,
                    "rules_failed": o.rules_failed,
                    "actions_executed": o.actions_executed,
                    "actions_failed": o.actions_failed,
                    "rule_logic": o.rule_logic,
                    "subgroups": [
                        {
                            "subgroup_id": s.subgroup_id,
                            "verdict": int(s.verdict),
                            "rules_run": s.rules_run,
                            "rules_passed": s.rules_passed,
                            "rules_failed": s.rules_failed,
                        }
                        for s in o.subgroups
                    ],
                }
                for o in self.outcomes
            ],
            "results": [
                {
                    "group_id": r.group_id,
                    "subgroup_id": r.subgroup_id,
                    "rule_id": r.rule_id,
                    "verdict": int(r.verdict),
                    "operand1": format_operand(r.operand1),
                    "operand2": format_operand(r.operand2),
                    "message": renderer.render(r),
                }
                for r in self.collection.filtered(output_type)
            ],
        }
