"""Validity-window gate for rule groups."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from rulegate.core.coercion import parse_date
from rulegate.exceptions import ValidityParseError
from rulegate.models import RuleGroup

log = logging.getLogger(__name__)


def parse_bound(text: str | None) -> date | None:
    """Parse one ``yyyy-MM-dd`` bound, dropping any time of day.

    Empty or missing bounds are open (None).
    """
    if text is None or not str(text).strip():
        return None
    try:
        return parse_date(str(text))
    except ValueError as exc:
        raise ValidityParseError(f"Malformed validity date {text!r}") from exc


def is_group_active(group: RuleGroup, today: date | None = None) -> bool:
    """True iff ``valid_from <= today <= valid_until`` (inclusive).

    Raises:
        ValidityParseError: If either bound is malformed.
    """
    today = today or date.today()
    start = parse_bound(group.valid_from)
    end = parse_bound(group.valid_until)
    if start is not None and today < start:
        return False
    if end is not None and today > end:
        return False
    return True


def filter_active_groups(groups: Iterable[RuleGroup], today: date | None = None) -> list[RuleGroup]:
    """Keep groups whose validity window contains ``today``, preserving order.

    Groups with a malformed window are dropped with a warning.
    """
    today = today or date.today()
    active: list[RuleGroup] = []
    for group in groups:
        try:
            eligible = is_group_active(group, today)
        except ValidityParseError as exc:
            log.warning("Excluding group %s: %s", group.id, exc)
            continue
        if eligible:
            active.append(group)
        else:
            log.info(
                "Group %s is outside its validity window %s..%s",
                group.id,
                group.valid_from or "",
                group.valid_until or "",
            )
    return active
