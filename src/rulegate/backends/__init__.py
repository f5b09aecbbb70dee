"""Rules backends: where rule groups come from.

Factory function::

    from rulegate.backends import create_rules_backend
    backend = create_rules_backend(settings.rules)
    groups = backend.list_groups()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rulegate.backends.protocol import IRulesBackend

if TYPE_CHECKING:
    from rulegate.core.config import RulesConfig


def create_rules_backend(config: RulesConfig) -> IRulesBackend:
    """Create the backend selected by ``config.backend``."""
    backend_type = config.backend

    if backend_type == "file":
        from rulegate.backends.file_backend import FileRulesBackend

        return FileRulesBackend(config.rules_path)

    if backend_type == "sql":
        from rulegate.backends.sql_backend import SQLRulesBackend

        return SQLRulesBackend(config.project_name, database_path=config.database_path)

    if backend_type == "memory":
        from rulegate.backends.memory_backend import MemoryRulesBackend

        return MemoryRulesBackend()

    raise ValueError(f"Unknown rules backend: {backend_type!r}")


__all__ = ["IRulesBackend", "create_rules_backend"]
