"""rulegate: declarative business-rule validation for runtime objects.

Rule groups (group -> subgroups -> rules, plus group actions) are loaded from a
backend, evaluated against one object at a time and reported with rendered
pass/fail messages::

    from rulegate import AppSettings, create_engine

    engine = create_engine(AppSettings())
    report = engine.run({"age": 17, "status": ""})
    for message in report.messages():
        print(message)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rulegate.core.config import AppSettings
from rulegate.core.startup_checks import validate_settings
from rulegate.engine import (
    ActionRegistry,
    CheckRegistry,
    EngineReport,
    GroupOutcome,
    MessageRenderer,
    RuleEngine,
    RuleExecutionCollection,
)
from rulegate.exceptions import RuleGateError
from rulegate.models import (
    Action,
    ActionObject,
    ExecuteIf,
    LogicalOperator,
    OutputType,
    Parameter,
    Rule,
    RuleExecutionResult,
    RuleGroup,
    RuleMessage,
    RuleObject,
    RuleSubGroup,
    ValueType,
    Verdict,
)

if TYPE_CHECKING:
    from rulegate.backends.protocol import IRulesBackend


def create_engine(settings: AppSettings, backend: IRulesBackend | None = None) -> RuleEngine:
    """Create a RuleEngine wired to the backend selected in ``settings``.

    Raises:
        ValueError: If ``settings`` fail the startup checks.
    """
    from rulegate.backends import create_rules_backend

    validate_settings(settings, check_rules_source=backend is None)
    if backend is None:
        backend = create_rules_backend(settings.rules)
    return RuleEngine(
        backend,
        config=settings.engine,
        active_only=settings.rules.active_only,
    )


__all__ = [
    "Action",
    "ActionObject",
    "ActionRegistry",
    "AppSettings",
    "CheckRegistry",
    "EngineReport",
    "ExecuteIf",
    "GroupOutcome",
    "LogicalOperator",
    "MessageRenderer",
    "OutputType",
    "Parameter",
    "Rule",
    "RuleEngine",
    "RuleExecutionCollection",
    "RuleExecutionResult",
    "RuleGateError",
    "RuleGroup",
    "RuleMessage",
    "RuleObject",
    "RuleSubGroup",
    "ValueType",
    "Verdict",
    "create_engine",
]
