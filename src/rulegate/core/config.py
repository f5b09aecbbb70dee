"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``RULEGATE_<GROUP>_*`` env vars::

    export RULEGATE_RULES_BACKEND=file
    export RULEGATE_RULES_RULES_PATH=./rules
    export RULEGATE_ENGINE_OUTPUT_TYPE=all
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineConfig(BaseSettings):
    """Evaluation and reporting behaviour.

    Env vars use ``RULEGATE_ENGINE_`` prefix.
    """

    model_config = {"env_prefix": "RULEGATE_ENGINE_"}

    # strftime pattern stamped on every RuleExecutionResult
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    output_type: Literal["failed", "passed", "all"] = "failed"
    preserve_results: bool = True
    # Field of the target object used as its label in results and reports
    object_label_field: str = ""


class RulesConfig(BaseSettings):
    """Rules backend configuration.

    Env vars use ``RULEGATE_RULES_`` prefix.
    """

    model_config = {"env_prefix": "RULEGATE_RULES_"}

    backend: Literal["file", "sql", "memory"] = "file"
    rules_path: Path = Path("./rules")
    database_path: Path = Path("./rules.db")
    project_name: str = ""
    active_only: bool = True


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``RULEGATE_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "RULEGATE_OBSERVABILITY_"}

    log_level: str = "INFO"
    json_logs: bool | None = Field(
        default=None,
        description="Force JSON (True) or console (False) output; None picks by TTY.",
    )


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    engine: EngineConfig = EngineConfig()
    rules: RulesConfig = RulesConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
