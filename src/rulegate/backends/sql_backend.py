"""Relational rules backend: loads a project's rule groups through a DB-API connection.

Tables (see ``SCHEMA``)::

    project          name, getter/setter accessor names
    types            id -> value type tag
    rulegroup        per project; disabled groups are skipped
    rulesubgroup     per group
    rule             per subgroup, references "check"
    rulegroupaction  per group, references "action"
    reference_fields per project

Rows are translated into the same document layout the file backend reads,
so both backends share one parser. SQLite is used when no connection is
injected.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import date
from pathlib import Path
from typing import Any

from rulegate.backends.parsing import parse_group, parse_reference_field
from rulegate.engine.extractor import GET_FIELD_VALUE, SET_FIELD_VALUE
from rulegate.engine.validity import filter_active_groups
from rulegate.exceptions import RuleDefinitionError
from rulegate.models import ReferenceField, RuleGroup

log = logging.getLogger(__name__)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS project (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    description TEXT,
    object_method_getter TEXT NOT NULL DEFAULT '{GET_FIELD_VALUE}',
    object_method_setter TEXT NOT NULL DEFAULT '{SET_FIELD_VALUE}'
);
CREATE TABLE IF NOT EXISTS types (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS rulegroup (
    id INTEGER PRIMARY KEY,
    project_id INTEGER NOT NULL REFERENCES project(id),
    name TEXT NOT NULL,
    description TEXT,
    valid_from TEXT,
    valid_until TEXT,
    dependent_rulegroup_id INTEGER,
    dependent_rulegroup_execute_if TEXT,
    output_after_actions INTEGER NOT NULL DEFAULT 0,
    preserve_results INTEGER NOT NULL DEFAULT 1,
    disabled INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS rulesubgroup (
    id INTEGER PRIMARY KEY,
    rulegroup_id INTEGER NOT NULL REFERENCES rulegroup(id),
    name TEXT NOT NULL,
    description TEXT,
    intergroupoperator TEXT,
    ruleoperator TEXT
);
CREATE TABLE IF NOT EXISTS "check" (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    name_descriptive TEXT,
    description TEXT,
    package TEXT
);
CREATE TABLE IF NOT EXISTS rule (
    id INTEGER PRIMARY KEY,
    rulesubgroup_id INTEGER NOT NULL REFERENCES rulesubgroup(id),
    check_id INTEGER NOT NULL REFERENCES "check"(id),
    name TEXT NOT NULL,
    description TEXT,
    object1_parameter TEXT,
    object1_parametertype_id INTEGER,
    object1_type_id INTEGER,
    object2_parameter TEXT,
    object2_parametertype_id INTEGER,
    object2_type_id INTEGER,
    expectedvalue TEXT,
    expectedvalue_type_id INTEGER,
    additional_parameter TEXT,
    additional_parameter_type_id INTEGER,
    message_passed TEXT,
    message_failed TEXT
);
CREATE TABLE IF NOT EXISTS action (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    module TEXT
);
CREATE TABLE IF NOT EXISTS rulegroupaction (
    id INTEGER PRIMARY KEY,
    rulegroup_id INTEGER NOT NULL REFERENCES rulegroup(id),
    action_id INTEGER NOT NULL REFERENCES action(id),
    name TEXT NOT NULL,
    description TEXT,
    execute_if TEXT,
    object1_parameter TEXT,
    object1_parametertype_id INTEGER,
    object1_type_id INTEGER,
    object2_parameter TEXT,
    object2_parametertype_id INTEGER,
    object2_type_id INTEGER,
    object3_parameter TEXT,
    object3_parametertype_id INTEGER,
    object3_type_id INTEGER,
    parameter1 TEXT,
    parameter1_type_id INTEGER,
    parameter2 TEXT,
    parameter2_type_id INTEGER,
    parameter3 TEXT,
    parameter3_type_id INTEGER
);
CREATE TABLE IF NOT EXISTS reference_fields (
    id INTEGER PRIMARY KEY,
    project_id INTEGER NOT NULL REFERENCES project(id),
    name TEXT NOT NULL,
    name_descriptive TEXT,
    description TEXT,
    java_type_id INTEGER
);
"""


def create_schema(connection: sqlite3.Connection) -> None:
    """Create the rules tables in a SQLite database if they do not exist."""
    connection.executescript(SCHEMA)
    connection.commit()


def _present(value: Any) -> bool:
    return value is not None and str(value) != ""


class SQLRulesBackend:
    """Resolves one project's rule groups from a relational database.

    Any DB-API 2.0 connection can be injected; ``placeholder`` must match its
    paramstyle. Groups are read once and cached.
    """

    def __init__(
        self,
        project_name: str,
        *,
        database_path: Path | None = None,
        connection: Any | None = None,
        placeholder: str = "?",
    ) -> None:
        if connection is None:
            if database_path is None:
                raise ValueError("SQLRulesBackend needs a database_path or a connection")
            connection = sqlite3.connect(str(database_path))
            self._owns_connection = True
        else:
            self._owns_connection = False
        self._connection = connection
        self._project_name = project_name
        self._placeholder = placeholder
        self._groups: dict[str, RuleGroup] | None = None
        self._reference_fields: list[ReferenceField] | None = None
        self._types: dict[int, str] = {}

    def list_groups(
        self,
        *,
        active_only: bool = True,
        today: date | None = None,
    ) -> list[RuleGroup]:
        """Return the project's enabled groups, optionally only those valid on ``today``."""
        groups = list(self._ensure_loaded().values())
        if active_only:
            return filter_active_groups(groups, today)
        return groups

    def get_group(self, group_id: str) -> RuleGroup:
        groups = self._ensure_loaded()
        if group_id not in groups:
            raise KeyError(f"Group {group_id!r} not found in project {self._project_name!r}")
        return groups[group_id]

    def list_reference_fields(self) -> list[ReferenceField]:
        """Return the project's reference fields."""
        if self._reference_fields is None:
            p = self._placeholder
            rows = self._query(
                "SELECT rf.* FROM reference_fields rf JOIN project pr ON rf.project_id = pr.id "
                f"WHERE pr.name = {p} ORDER BY rf.id",
                (self._project_name,),
            )
            self._reference_fields = [
                parse_reference_field({**row, "type_id": row.get("java_type_id")}) for row in rows
            ]
        return list(self._reference_fields)

    def close(self) -> None:
        """Close the connection if this backend opened it."""
        if self._owns_connection:
            self._connection.close()

    # ── Loading ─────────────────────────────────────────────────────

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        with closing(self._connection.cursor()) as cursor:
            cursor.execute(sql, params)
            columns = [d[0] for d in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _ensure_loaded(self) -> dict[str, RuleGroup]:
        if self._groups is not None:
            return self._groups

        p = self._placeholder
        projects = self._query(f"SELECT * FROM project WHERE name = {p}", (self._project_name,))
        if not projects:
            raise RuleDefinitionError(f"Project {self._project_name!r} not found")
        project = projects[0]
        self._types = {int(row["id"]): str(row["name"]) for row in self._query("SELECT * FROM types")}

        rows = self._query(
            f"SELECT * FROM rulegroup WHERE project_id = {p} ORDER BY id", (project["id"],)
        )
        names_by_id = {row["id"]: str(row["name"]) for row in rows}

        groups: dict[str, RuleGroup] = {}
        for row in rows:
            if row.get("disabled"):
                log.debug("Skipping disabled group %s", row["name"])
                continue
            try:
                group = parse_group(self._group_document(row, project, names_by_id))
            except RuleDefinitionError:
                log.exception("Cannot build rule group %s (id %s), skipping", row["name"], row["id"])
                continue
            groups[group.id] = group

        self._groups = groups
        log.info("Loaded %d rule group(s) for project %s", len(groups), self._project_name)
        return groups

    def _type_name(self, type_id: Any, where: str) -> str:
        if type_id is None or str(type_id) == "":
            return "string"
        try:
            return self._types[int(type_id)]
        except (KeyError, ValueError) as exc:
            raise RuleDefinitionError(f"{where}: unknown type id {type_id!r}") from exc

    def _group_document(
        self,
        row: dict[str, Any],
        project: dict[str, Any],
        names_by_id: dict[Any, str],
    ) -> dict[str, Any]:
        p = self._placeholder
        dependent = row.get("dependent_rulegroup_id")
        if _present(dependent) and str(dependent) != "0":
            dependent_name = names_by_id.get(dependent)
            if dependent_name is None:
                raise RuleDefinitionError(
                    f"{row['name']}: dependent group id {dependent!r} not in project"
                )
        else:
            dependent_name = None

        subgroups = []
        for sg in self._query(
            f"SELECT * FROM rulesubgroup WHERE rulegroup_id = {p} ORDER BY id", (row["id"],)
        ):
            rules = self._query(
                'SELECT r.*, c.name AS check_name, c.package AS check_package '
                'FROM rule r JOIN "check" c ON r.check_id = c.id '
                f"WHERE r.rulesubgroup_id = {p} ORDER BY r.id",
                (sg["id"],),
            )
            subgroups.append(
                {
                    "id": sg["name"],
                    "description": sg.get("description") or "",
                    "intra_operator": sg.get("ruleoperator"),
                    "inter_operator": sg.get("intergroupoperator"),
                    "rules": [self._rule_document(r, project) for r in rules],
                }
            )

        actions = self._query(
            "SELECT rga.*, a.name AS action_name, a.module AS action_module "
            "FROM rulegroupaction rga JOIN action a ON rga.action_id = a.id "
            f"WHERE rga.rulegroup_id = {p} ORDER BY rga.id",
            (row["id"],),
        )
        return {
            "id": row["name"],
            "description": row.get("description") or "",
            "valid_from": row.get("valid_from"),
            "valid_until": row.get("valid_until"),
            "dependent_group_id": dependent_name,
            "dependent_execute_if": row.get("dependent_rulegroup_execute_if"),
            "output_after_actions": bool(row.get("output_after_actions")),
            "preserve_results": bool(row.get("preserve_results", 1)),
            "subgroups": subgroups,
            "actions": [self._action_document(a, project) for a in actions],
        }

    def _rule_document(self, row: dict[str, Any], project: dict[str, Any]) -> dict[str, Any]:
        where = f"rule {row['name']}"
        getter = project["object_method_getter"]
        objects = []
        for n in (1, 2):
            if _present(row.get(f"object{n}_parameter")):
                objects.append(
                    {
                        "accessor": getter,
                        "selector": row[f"object{n}_parameter"],
                        "type": self._type_name(row.get(f"object{n}_type_id"), where),
                        "selector_type": self._type_name(row.get(f"object{n}_parametertype_id"), where),
                    }
                )
        doc: dict[str, Any] = {
            "id": row["name"],
            "description": row.get("description") or "",
            "check": (
                f"{row['check_package']}:{row['check_name']}"
                if _present(row.get("check_package"))
                else row["check_name"]
            ),
            "objects": objects,
            "messages": {
                verdict: row[f"message_{verdict}"]
                for verdict in ("passed", "failed")
                if _present(row.get(f"message_{verdict}"))
            },
        }
        if row.get("expectedvalue") is not None:
            doc["expected"] = {
                "type": self._type_name(row.get("expectedvalue_type_id"), where),
                "value": row["expectedvalue"],
            }
        if _present(row.get("additional_parameter")):
            doc["parameters"] = [
                {
                    "type": self._type_name(row.get("additional_parameter_type_id"), where),
                    "value": row["additional_parameter"],
                }
            ]
        return doc

    def _action_document(self, row: dict[str, Any], project: dict[str, Any]) -> dict[str, Any]:
        where = f"action {row['name']}"
        getters = []
        for n in (1, 3):
            if _present(row.get(f"object{n}_parameter")):
                getters.append(
                    {
                        "accessor": project["object_method_getter"],
                        "selector": row[f"object{n}_parameter"],
                        "type": self._type_name(row.get(f"object{n}_type_id"), where),
                    }
                )
        doc: dict[str, Any] = {
            "id": row["name"],
            "description": row.get("description") or "",
            "function": (
                f"{row['action_module']}:{row['action_name']}"
                if _present(row.get("action_module"))
                else row["action_name"]
            ),
            "execute_if": row.get("execute_if"),
            "getters": getters,
            "parameters": [
                {
                    "type": self._type_name(row.get(f"parameter{n}_type_id"), where),
                    "value": row[f"parameter{n}"],
                }
                for n in (1, 2, 3)
                if _present(row.get(f"parameter{n}"))
            ],
        }
        if _present(row.get("object2_parameter")):
            setter = {
                "accessor": project["object_method_setter"],
                "selector": row["object2_parameter"],
            }
            if _present(row.get("object2_type_id")):
                setter["type"] = self._type_name(row["object2_type_id"], where)
            doc["setter"] = setter
        return doc
