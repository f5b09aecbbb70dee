"""Builtin check library.

Usage::

    from rulegate.checks import default_check_registry

    checks = default_check_registry()
    checks.invoke("starts_with", "ACME Corp", "acme", True)   # True
"""

from __future__ import annotations

from rulegate.checks import comparison, dates, numeric, strings
from rulegate.engine.registry import CheckRegistry

BUILTIN_CHECKS = [
    *comparison.CHECKS,
    *numeric.CHECKS,
    *strings.CHECKS,
    *dates.CHECKS,
]


def default_check_registry() -> CheckRegistry:
    """Return a new registry populated with every builtin check."""
    registry = CheckRegistry()
    registry.register_all(BUILTIN_CHECKS)
    return registry


__all__ = ["BUILTIN_CHECKS", "default_check_registry"]
