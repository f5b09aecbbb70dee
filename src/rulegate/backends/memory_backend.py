"""In-memory rules backend for testing and programmatic rule sets."""

from __future__ import annotations

from datetime import date

from rulegate.engine.validity import filter_active_groups
from rulegate.models import ReferenceField, RuleGroup


class MemoryRulesBackend:
    """Dict-backed rules backend. Insertion order is declaration order."""

    def __init__(
        self,
        groups: list[RuleGroup] | None = None,
        *,
        reference_fields: list[ReferenceField] | None = None,
    ) -> None:
        self._groups = {g.id: g for g in (groups or [])}
        self._reference_fields = list(reference_fields or [])

    def add_group(self, group: RuleGroup) -> None:
        """Add or replace a group; a replaced group keeps its position."""
        self._groups[group.id] = group

    def list_groups(
        self,
        *,
        active_only: bool = True,
        today: date | None = None,
    ) -> list[RuleGroup]:
        """Return groups, optionally only those valid on ``today``."""
        groups = list(self._groups.values())
        if active_only:
            return filter_active_groups(groups, today)
        return groups

    def get_group(self, group_id: str) -> RuleGroup:
        """Get a group by id."""
        if group_id not in self._groups:
            raise KeyError(f"Group {group_id!r} not found")
        return self._groups[group_id]

    def list_reference_fields(self) -> list[ReferenceField]:
        return list(self._reference_fields)
