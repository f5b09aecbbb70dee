"""Builtin action library."""

from __future__ import annotations

from rulegate.actions import numeric, strings
from rulegate.engine.registry import ActionRegistry

BUILTIN_ACTIONS = [*strings.ACTIONS, *numeric.ACTIONS]


def default_action_registry() -> ActionRegistry:
    """Return a new registry populated with every builtin action."""
    registry = ActionRegistry()
    registry.register_all(BUILTIN_ACTIONS)
    return registry


__all__ = ["BUILTIN_ACTIONS", "default_action_registry"]
