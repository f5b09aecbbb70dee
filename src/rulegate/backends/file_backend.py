"""File-backed rules backend: loads rule groups from YAML or JSON on disk."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from rulegate.backends.parsing import parse_document
from rulegate.engine.validity import filter_active_groups
from rulegate.exceptions import RuleDefinitionError
from rulegate.models import ReferenceField, RuleGroup

log = logging.getLogger(__name__)

RULE_FILE_SUFFIXES = (".yaml", ".yml", ".json")


class FileRulesBackend:
    """Loads rule groups from a YAML/JSON file or a directory of them.

    Files in a directory are read in name order; groups keep their order
    within each file. The rules are lazy-loaded on first access.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._groups: dict[str, RuleGroup] | None = None
        self._reference_fields: list[ReferenceField] = []

    def list_groups(
        self,
        *,
        active_only: bool = True,
        today: date | None = None,
    ) -> list[RuleGroup]:
        """Return groups from disk, optionally only those valid on ``today``."""
        groups = list(self._ensure_loaded().values())
        if active_only:
            return filter_active_groups(groups, today)
        return groups

    def get_group(self, group_id: str) -> RuleGroup:
        """Get a single group by id."""
        groups = self._ensure_loaded()
        if group_id not in groups:
            raise KeyError(f"Group {group_id!r} not found in {self._path}")
        return groups[group_id]

    def list_reference_fields(self) -> list[ReferenceField]:
        self._ensure_loaded()
        return list(self._reference_fields)

    def reload(self) -> None:
        """Drop the cached rules so the next access re-reads the files."""
        self._groups = None
        self._reference_fields = []

    def _ensure_loaded(self) -> dict[str, RuleGroup]:
        """Lazy-load the rules on first access."""
        if self._groups is not None:
            return self._groups

        if not self._path.exists():
            raise FileNotFoundError(f"Rules path not found: {self._path}")

        if self._path.is_dir():
            files = sorted(
                p for p in self._path.iterdir() if p.suffix in RULE_FILE_SUFFIXES and p.is_file()
            )
        else:
            files = [self._path]

        groups: dict[str, RuleGroup] = {}
        fields: list[ReferenceField] = []
        for file in files:
            file_groups, file_fields = parse_document(self._read(file), source=file.name)
            for group in file_groups:
                if group.id in groups:
                    raise RuleDefinitionError(f"{file.name}: duplicate group id {group.id!r}")
                groups[group.id] = group
            fields.extend(file_fields)

        self._groups = groups
        self._reference_fields = fields
        log.info("Loaded %d rule group(s) from %d file(s) under %s", len(groups), len(files), self._path)
        return groups

    @staticmethod
    def _read(file: Path) -> Any:
        raw_text = file.read_text(encoding="utf-8")
        try:
            if file.suffix in (".yaml", ".yml"):
                return yaml.safe_load(raw_text) or {}
            return json.loads(raw_text)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise RuleDefinitionError(f"{file.name}: cannot parse rules document: {exc}") from exc
