"""Shared fixtures for rulegate tests."""

from __future__ import annotations

from datetime import date

import pytest

from rulegate.actions import default_action_registry
from rulegate.checks import default_check_registry
from rulegate.engine.actions import ActionExecutor
from rulegate.engine.context import EvaluationContext
from rulegate.engine.evaluator import RuleEvaluator
from rulegate.engine.extractor import ValueExtractor
from rulegate.engine.registry import ActionRegistry, CheckRegistry

TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    """Fixed evaluation date (a Saturday)."""
    return TODAY


@pytest.fixture
def checks() -> CheckRegistry:
    return default_check_registry()


@pytest.fixture
def actions() -> ActionRegistry:
    return default_action_registry()


@pytest.fixture
def extractor() -> ValueExtractor:
    return ValueExtractor()


@pytest.fixture
def evaluator(extractor: ValueExtractor, checks: CheckRegistry) -> RuleEvaluator:
    return RuleEvaluator(extractor, checks)


@pytest.fixture
def executor(extractor: ValueExtractor, actions: ActionRegistry) -> ActionExecutor:
    return ActionExecutor(extractor, actions)


@pytest.fixture
def context() -> EvaluationContext:
    return EvaluationContext(object_label="record-1", timestamp="2024-06-15 12:00:00")


@pytest.fixture
def customer() -> dict:
    """A mapping target object."""
    return {
        "id": "C-100",
        "name": "ACME Corp",
        "age": 42,
        "country": "DE",
        "zip": "1234",
        "status": "",
        "signed": "2024-01-31",
    }
