"""Rules backend protocol: the contract all backends implement."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from rulegate.models import ReferenceField, RuleGroup


@runtime_checkable
class IRulesBackend(Protocol):
    """Protocol for rule group storage backends (file, sql, memory)."""

    def list_groups(
        self,
        *,
        active_only: bool = True,
        today: date | None = None,
    ) -> list[RuleGroup]:
        """Return groups in declaration order.

        With ``active_only`` groups outside their validity window on ``today``
        (or with a malformed window) are left out.
        """
        ...

    def get_group(self, group_id: str) -> RuleGroup:
        """Get a single group by id. Raises KeyError if not found."""
        ...

    def list_reference_fields(self) -> list[ReferenceField]:
        """Return the field catalogue available to rule authors."""
        ...
