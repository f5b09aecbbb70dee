"""Evaluation engine: extraction, check dispatch, combinators, actions, rendering."""

from __future__ import annotations

from rulegate.engine.context import (
    EngineReport,
    EvaluationContext,
    GroupOutcome,
    RuleExecutionCollection,
    SubgroupOutcome,
)
from rulegate.engine.engine import RuleEngine
from rulegate.engine.evaluator import RuleEvaluator, combine, fold, rule_logic
from rulegate.engine.extractor import AccessorRegistry, ValueExtractor
from rulegate.engine.registry import ActionRegistry, CheckRegistry
from rulegate.engine.renderer import MessageRenderer

__all__ = [
    "AccessorRegistry",
    "ActionRegistry",
    "CheckRegistry",
    "EngineReport",
    "EvaluationContext",
    "GroupOutcome",
    "MessageRenderer",
    "RuleEngine",
    "RuleEvaluator",
    "RuleExecutionCollection",
    "SubgroupOutcome",
    "ValueExtractor",
    "combine",
    "fold",
    "rule_logic",
]
