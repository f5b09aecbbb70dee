"""Build rule trees from plain dicts (parsed YAML/JSON documents).

Document layout::

    reference_fields:
      - {name: age, name_descriptive: Age, description: Age in years}
    groups:
      - id: adults
        valid_from: "2024-01-01"
        subgroups:
          - id: age
            intra_operator: and
            rules:
              - id: age_ok
                check: greater_or_equal
                objects: [{field: age, type: integer}]
                expected: {type: integer, value: "18"}
                messages: {failed: "age $1 is below $0"}
        actions:
          - id: flag
            function: set_value
            execute_if: failed
            parameters: ["minor"]
            setter: {field: status}

An object given as ``field: X`` reads through ``get_field_value`` (or writes
through ``set_field_value`` for setters) with selector ``X``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rulegate.core.coercion import coerce_value
from rulegate.engine.extractor import GET_FIELD_VALUE, SET_FIELD_VALUE
from rulegate.exceptions import RuleDefinitionError
from rulegate.models import (
    Action,
    ActionObject,
    ExecuteIf,
    LogicalOperator,
    Parameter,
    ReferenceField,
    Rule,
    RuleGroup,
    RuleMessage,
    RuleObject,
    RuleSubGroup,
    ValueType,
    Verdict,
)


def parse_value_type(tag: Any, *, where: str = "") -> ValueType:
    """Resolve a type tag (case-insensitive, aliases allowed)."""
    if isinstance(tag, ValueType):
        return tag
    try:
        return ValueType(str(tag))
    except ValueError as exc:
        raise RuleDefinitionError(f"{where}: unknown value type {tag!r}") from exc


def _parse_enum(enum_cls: Any, raw: Any, default: Any, where: str) -> Any:
    if raw is None or raw == "":
        return default
    try:
        return enum_cls(str(raw))
    except ValueError as exc:
        raise RuleDefinitionError(f"{where}: invalid {enum_cls.__name__} {raw!r}") from exc


def _infer_type(value: Any) -> ValueType:
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, int):
        return ValueType.INTEGER
    if isinstance(value, float):
        return ValueType.DOUBLE
    return ValueType.STRING


def _literal_text(value: Any) -> str | None:
    return None if value is None else coerce_value(value, "string")


def parse_parameter(data: Any, *, where: str = "") -> Parameter:
    """A parameter is ``{type, value, setter_value}`` or a bare scalar."""
    if not isinstance(data, Mapping):
        return Parameter(_infer_type(data), _literal_text(data))
    raw_value = data.get("value")
    value_type = (
        parse_value_type(data["type"], where=where) if "type" in data else _infer_type(raw_value)
    )
    return Parameter(
        value_type,
        _literal_text(raw_value),
        is_setter_value=bool(data.get("setter_value", False)),
    )


def parse_rule_object(data: Mapping[str, Any], *, where: str = "") -> RuleObject:
    if "field" in data:
        accessor, selector = GET_FIELD_VALUE, data["field"]
    elif "accessor" in data:
        accessor, selector = data["accessor"], data.get("selector")
    else:
        raise RuleDefinitionError(f"{where}: object needs 'field' or 'accessor'")
    return RuleObject(
        accessor=str(accessor),
        selector=None if selector is None else str(selector),
        value_type=parse_value_type(data.get("type", "string"), where=where),
        selector_type=parse_value_type(data.get("selector_type", "string"), where=where),
        target_type=str(data.get("target_type") or ""),
    )


def parse_action_object(
    data: Mapping[str, Any], *, setter: bool = False, where: str = ""
) -> ActionObject:
    if "field" in data:
        accessor = SET_FIELD_VALUE if setter else GET_FIELD_VALUE
        selector = data["field"]
    elif "accessor" in data:
        accessor, selector = data["accessor"], data.get("selector")
    else:
        raise RuleDefinitionError(f"{where}: action object needs 'field' or 'accessor'")
    # An untyped setter writes the action result unchanged
    tag = data.get("type", None if setter else "string")
    return ActionObject(
        accessor=str(accessor),
        selector=None if selector is None else str(selector),
        value_type=None if tag is None else parse_value_type(tag, where=where),
        parameters=[
            parse_parameter(p, where=where) for p in data.get("parameters", [])
        ],
    )


def _parse_messages(raw: Any, where: str) -> list[RuleMessage]:
    if not raw:
        return []
    if isinstance(raw, Mapping):
        items = [{"verdict": k, "text": v} for k, v in raw.items()]
    else:
        items = list(raw)
    messages: list[RuleMessage] = []
    for item in items:
        verdict_tag = str(item["verdict"]).strip().lower()
        if verdict_tag not in ("passed", "failed"):
            raise RuleDefinitionError(f"{where}: message verdict must be passed or failed")
        verdict = Verdict.PASSED if verdict_tag == "passed" else Verdict.FAILED
        messages.append(RuleMessage(verdict=verdict, text=str(item["text"])))
    return messages


def parse_rule(data: Mapping[str, Any], *, where: str = "") -> Rule:
    rule_id = str(data["id"])
    where = f"{where}/{rule_id}"
    objects = [parse_rule_object(o, where=where) for o in data.get("objects", [])]
    if not 1 <= len(objects) <= 2:
        raise RuleDefinitionError(f"{where}: a rule needs one or two objects, got {len(objects)}")
    expected = data.get("expected")
    return Rule(
        id=rule_id,
        check=str(data["check"]),
        objects=objects,
        description=str(data.get("description") or ""),
        expected=None if expected is None else parse_parameter(expected, where=where),
        parameters=[parse_parameter(p, where=where) for p in data.get("parameters", [])],
        messages=_parse_messages(data.get("messages"), where),
    )


def parse_subgroup(data: Mapping[str, Any], *, where: str = "") -> RuleSubGroup:
    subgroup_id = str(data["id"])
    where = f"{where}/{subgroup_id}"
    return RuleSubGroup(
        id=subgroup_id,
        rules=[parse_rule(r, where=where) for r in data.get("rules", [])],
        description=str(data.get("description") or ""),
        intra_operator=_parse_enum(
            LogicalOperator, data.get("intra_operator"), LogicalOperator.AND, where
        ),
        inter_operator=_parse_enum(
            LogicalOperator, data.get("inter_operator"), LogicalOperator.AND, where
        ),
    )


def parse_action(data: Mapping[str, Any], *, where: str = "") -> Action:
    action_id = str(data["id"])
    where = f"{where}/actions/{action_id}"
    setter = data.get("setter")
    return Action(
        id=action_id,
        function=str(data["function"]),
        execute_if=_parse_enum(ExecuteIf, data.get("execute_if"), ExecuteIf.ALWAYS, where),
        description=str(data.get("description") or ""),
        getters=[parse_action_object(g, where=where) for g in data.get("getters", [])],
        setter=None if setter is None else parse_action_object(setter, setter=True, where=where),
        parameters=[parse_parameter(p, where=where) for p in data.get("parameters", [])],
    )


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_group(data: Mapping[str, Any], *, where: str = "") -> RuleGroup:
    """Build one ``RuleGroup``.

    Raises:
        RuleDefinitionError: On missing keys, unknown type tags, bad enum
            values or literals that do not fit their declared type.
    """
    try:
        group_id = str(data["id"])
        where = f"{where}{group_id}"
        return RuleGroup(
            id=group_id,
            subgroups=[parse_subgroup(sg, where=where) for sg in data.get("subgroups", [])],
            actions=[parse_action(a, where=where) for a in data.get("actions", [])],
            description=str(data.get("description") or ""),
            valid_from=_optional_text(data.get("valid_from")),
            valid_until=_optional_text(data.get("valid_until")),
            dependent_group_id=_optional_text(data.get("dependent_group_id")),
            dependent_execute_if=_parse_enum(
                ExecuteIf, data.get("dependent_execute_if"), ExecuteIf.PASSED, where
            ),
            output_after_actions=bool(data.get("output_after_actions", False)),
            preserve_results=bool(data.get("preserve_results", True)),
        )
    except KeyError as exc:
        raise RuleDefinitionError(f"{where or 'group'}: missing required key {exc}") from exc
    except (TypeError, AttributeError) as exc:
        raise RuleDefinitionError(f"{where or 'group'}: malformed definition: {exc}") from exc


def parse_reference_field(data: Mapping[str, Any]) -> ReferenceField:
    try:
        type_id = data.get("type_id")
        return ReferenceField(
            name=str(data["name"]),
            name_descriptive=str(data.get("name_descriptive") or ""),
            description=str(data.get("description") or ""),
            type_id=None if type_id is None else int(type_id),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RuleDefinitionError(f"Malformed reference field {data!r}: {exc}") from exc


def parse_document(
    data: Mapping[str, Any], *, source: str = ""
) -> tuple[list[RuleGroup], list[ReferenceField]]:
    """Parse a whole rules document into groups and reference fields."""
    if not isinstance(data, Mapping):
        raise RuleDefinitionError(f"{source}: rules document must be a mapping")
    prefix = f"{source}:" if source else ""
    groups = [parse_group(g, where=prefix) for g in data.get("groups") or []]
    fields = [parse_reference_field(f) for f in data.get("reference_fields") or []]
    return groups, fields
