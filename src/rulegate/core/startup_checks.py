"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulegate.core.config import AppSettings

log = logging.getLogger(__name__)


def validate_settings(settings: AppSettings, *, check_rules_source: bool = True) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig.

    ``check_rules_source`` is off when the caller supplies its own backend.
    """
    if check_rules_source:
        _check_rules_source(settings)
    _check_timestamp_format(settings)


def _check_rules_source(settings: AppSettings) -> None:
    """Reject backends whose source does not exist or is not identified."""
    rules = settings.rules
    if rules.backend == "file" and not rules.rules_path.exists():
        raise ValueError(
            f"RULEGATE_RULES_RULES_PATH points to {str(rules.rules_path)!r}, which does not exist."
        )
    if rules.backend == "sql":
        if not rules.project_name:
            raise ValueError(
                "RULEGATE_RULES_PROJECT_NAME is required for the sql rules backend."
            )
        if not rules.database_path.exists():
            raise ValueError(
                f"RULEGATE_RULES_DATABASE_PATH points to {str(rules.database_path)!r}, "
                "which does not exist."
            )
    if rules.backend == "memory":
        log.warning(
            "RULEGATE_RULES_BACKEND=memory starts with an empty rule set. "
            "Groups must be added programmatically."
        )


def _check_timestamp_format(settings: AppSettings) -> None:
    """Reject a timestamp format without any strftime directive."""
    if "%" not in settings.engine.timestamp_format:
        raise ValueError(
            f"RULEGATE_ENGINE_TIMESTAMP_FORMAT {settings.engine.timestamp_format!r} "
            "contains no strftime directive."
        )
