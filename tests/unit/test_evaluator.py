"""Tests for verdict combinators and rule/subgroup/group evaluation."""

from __future__ import annotations

import itertools

import pytest

from rulegate.engine.context import EvaluationContext
from rulegate.engine.evaluator import RuleEvaluator, combine, fold, rule_logic, subgroup_logic
from rulegate.models import (
    InvalidConversion,
    LogicalOperator,
    Parameter,
    Rule,
    RuleGroup,
    RuleObject,
    RuleSubGroup,
    ValueType,
    Verdict,
)
from tests.fakes.fake_rules import field_rule, single_group

AND = LogicalOperator.AND
OR = LogicalOperator.OR
P = Verdict.PASSED
F = Verdict.FAILED


def _subgroup(sg_id: str, rule_ids: list[str], *, intra=AND, inter=AND) -> RuleSubGroup:
    rules = [field_rule(rid, "is_not_null", "id") for rid in rule_ids]
    return RuleSubGroup(id=sg_id, rules=rules, intra_operator=intra, inter_operator=inter)


# ── Combinators ─────────────────────────────────────────────────────


class TestCombine:
    @pytest.mark.parametrize(
        ("a", "b", "op", "expected"),
        [
            (P, P, AND, P),
            (P, F, AND, F),
            (F, P, AND, F),
            (F, F, AND, F),
            (P, P, OR, P),
            (P, F, OR, P),
            (F, P, OR, P),
            (F, F, OR, F),
        ],
    )
    def test_truth_table(self, a: Verdict, b: Verdict, op: LogicalOperator, expected: Verdict) -> None:
        assert combine(a, b, op) is expected


class TestFold:
    def test_empty_passes(self) -> None:
        assert fold([], []) is P

    def test_single_verdict(self) -> None:
        assert fold([F], [OR]) is F

    def test_and_subgroup_with_one_failure(self) -> None:
        assert fold([P, F], [AND, AND]) is F

    def test_mixed_chain(self) -> None:
        assert fold([P, F, P], [AND, AND, OR]) is P

    @pytest.mark.parametrize("length", [1, 2, 3, 4])
    def test_first_operator_ignored(self, length: int) -> None:
        for verdicts in itertools.product([P, F], repeat=length):
            for rest in itertools.product([AND, OR], repeat=length - 1):
                assert fold(verdicts, [AND, *rest]) is fold(verdicts, [OR, *rest])

    @pytest.mark.parametrize("length", [1, 2, 3, 4])
    def test_and_only_is_max(self, length: int) -> None:
        for verdicts in itertools.product([P, F], repeat=length):
            assert fold(verdicts, [AND] * length) == max(verdicts)

    @pytest.mark.parametrize("length", [1, 2, 3, 4])
    def test_or_only_is_min(self, length: int) -> None:
        for verdicts in itertools.product([P, F], repeat=length):
            assert fold(verdicts, [OR] * length) == min(verdicts)


class TestRuleLogic:
    def test_single_rule(self) -> None:
        group = RuleGroup(id="g", subgroups=[_subgroup("s1", ["r1"])])
        assert rule_logic(group) == "r1"

    def test_subgroup_chain(self) -> None:
        assert subgroup_logic(_subgroup("s1", ["r1", "r2", "r3"], intra=OR)) == "((r1 or r2) or r3)"

    def test_group_chain_uses_inter_operators(self) -> None:
        group = RuleGroup(
            id="g",
            subgroups=[
                _subgroup("s1", ["r1", "r2"], inter=OR),
                _subgroup("s2", ["r3"], inter=AND),
                _subgroup("s3", ["r4"], inter=OR),
            ],
        )
        assert rule_logic(group) == "(((r1 and r2) and r3) or r4)"

    def test_empty_group(self) -> None:
        assert rule_logic(RuleGroup(id="g")) == ""

    def test_empty_subgroup_rendered_explicitly(self) -> None:
        group = RuleGroup(id="g", subgroups=[_subgroup("s1", ["r1"]), _subgroup("s2", [])])
        assert rule_logic(group) == "(r1 and ())"


# ── Evaluation ──────────────────────────────────────────────────────


class TestRunRule:
    def test_integer_equals_expected_literal(self, evaluator: RuleEvaluator, customer: dict) -> None:
        rule = field_rule("r1", "equals", "zip", value_type=ValueType.INTEGER, expected="1234")
        result = evaluator.run_rule(rule, customer, group_id="g", subgroup_id="s")
        assert result.verdict is P
        assert result.operand1 == 1234
        assert result.operand2 == 1234
        assert result.group_id == "g"
        assert result.subgroup_id == "s"

    def test_two_extracted_operands(self, evaluator: RuleEvaluator) -> None:
        rule = Rule(
            id="r1",
            check="less",
            objects=[
                RuleObject("get_field_value", "low", ValueType.INTEGER),
                RuleObject("get_field_value", "high", ValueType.INTEGER),
            ],
        )
        result = evaluator.run_rule(rule, {"low": 1, "high": 9})
        assert result.verdict is P
        assert (result.operand1, result.operand2) == (1, 9)

    def test_parameters_follow_operands(self, evaluator: RuleEvaluator, customer: dict) -> None:
        rule = Rule(
            id="r1",
            check="starts_with",
            objects=[RuleObject("get_field_value", "name")],
            expected=Parameter(ValueType.STRING, "acme"),
            parameters=[Parameter(ValueType.BOOLEAN, "true")],
        )
        assert evaluator.run_rule(rule, customer).verdict is P

    def test_single_operand_check(self, evaluator: RuleEvaluator, customer: dict) -> None:
        rule = field_rule("r1", "is_empty", "status")
        result = evaluator.run_rule(rule, customer)
        assert result.verdict is P
        assert result.operand2 is None

    def test_missing_field_fails_closed(self, evaluator: RuleEvaluator, customer: dict) -> None:
        result = evaluator.run_rule(field_rule("r1", "is_null", "nickname"), customer)
        assert result.verdict is F
        assert result.operand1 is None

    def test_conversion_failure_fails_closed(self, evaluator: RuleEvaluator, customer: dict) -> None:
        rule = field_rule("r1", "is_not_null", "name", value_type=ValueType.INTEGER)
        result = evaluator.run_rule(rule, customer)
        assert result.verdict is F
        assert result.operand1 == InvalidConversion(ValueType.INTEGER)

    def test_unknown_check_fails_closed(self, evaluator: RuleEvaluator, customer: dict) -> None:
        result = evaluator.run_rule(field_rule("r1", "no_such_check", "id"), customer)
        assert result.verdict is F

    def test_signature_mismatch_fails_closed(self, evaluator: RuleEvaluator, customer: dict) -> None:
        result = evaluator.run_rule(field_rule("r1", "is_even", "name"), customer)
        assert result.verdict is F

    def test_rule_without_objects_fails(self, evaluator: RuleEvaluator) -> None:
        rule = Rule(id="r1", check="is_null", objects=[])
        assert evaluator.run_rule(rule, {}).verdict is F


class TestRunSubgroup:
    def test_and_with_one_failure(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        subgroup = RuleSubGroup(
            id="s1",
            rules=[
                field_rule("r1", "equals", "country", expected="DE"),
                field_rule("r2", "equals", "country", expected="FR"),
            ],
        )
        outcome = evaluator.run_subgroup(subgroup, customer, context, group_id="g")
        assert outcome.verdict is F
        assert (outcome.rules_run, outcome.rules_passed, outcome.rules_failed) == (2, 1, 1)
        assert context.subgroup_outcomes[("g", "s1")] is outcome

    def test_no_short_circuit(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        subgroup = RuleSubGroup(
            id="s1",
            rules=[
                field_rule("r1", "equals", "country", expected="FR"),
                field_rule("r2", "equals", "country", expected="DE"),
                field_rule("r3", "is_empty", "status"),
            ],
        )
        evaluator.run_subgroup(subgroup, customer, context, group_id="g")
        assert context.collection.rules_run == 3
        assert context.rule_verdicts == {("g", "s1", "r1"): F, ("g", "s1", "r2"): P, ("g", "s1", "r3"): P}

    def test_preserve_false_counts_without_storing(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        subgroup = RuleSubGroup(id="s1", rules=[field_rule("r1", "is_empty", "status")])
        evaluator.run_subgroup(subgroup, customer, context, group_id="g", preserve=False)
        assert context.collection.rules_run == 1
        assert len(context.collection) == 0

    def test_results_carry_context_label(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        subgroup = RuleSubGroup(id="s1", rules=[field_rule("r1", "is_empty", "status")])
        evaluator.run_subgroup(subgroup, customer, context, group_id="g")
        (result,) = context.collection.results
        assert result.object_label == "record-1"
        assert result.timestamp == context.timestamp


class TestRunGroup:
    def test_inter_operators_fold(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        passing = field_rule("ok", "equals", "country", expected="DE")
        failing = field_rule("bad", "equals", "country", expected="FR")
        group = RuleGroup(
            id="g",
            subgroups=[
                RuleSubGroup(id="s1", rules=[passing], inter_operator=OR),
                RuleSubGroup(id="s2", rules=[failing], inter_operator=AND),
                RuleSubGroup(id="s3", rules=[passing], inter_operator=OR),
            ],
        )
        outcome = evaluator.run_group(group, customer, context)
        assert outcome.verdict is P
        assert (outcome.rules_run, outcome.rules_passed, outcome.rules_failed) == (3, 2, 1)
        assert outcome.rule_logic == "((ok and bad) or ok)"
        assert [(s.subgroup_id, s.verdict, s.rules_failed) for s in outcome.subgroups] == [
            ("s1", P, 0),
            ("s2", F, 1),
            ("s3", P, 0),
        ]

    def test_counts_are_per_group(
        self, evaluator: RuleEvaluator, context: EvaluationContext, customer: dict
    ) -> None:
        first = single_group("g1", [field_rule("r1", "is_empty", "status")])
        second = single_group(
            "g2",
            [field_rule("r2", "is_empty", "name"), field_rule("r3", "is_empty", "status")],
            operator=OR,
        )
        evaluator.run_group(first, customer, context)
        outcome = evaluator.run_group(second, customer, context)
        assert outcome.verdict is P
        assert (outcome.rules_run, outcome.rules_passed, outcome.rules_failed) == (2, 1, 1)
        assert context.collection.rules_run == 3

    def test_empty_group_passes(self, evaluator: RuleEvaluator, context: EvaluationContext) -> None:
        outcome = evaluator.run_group(RuleGroup(id="g"), {}, context)
        assert outcome.verdict is P
        assert outcome.rules_run == 0
