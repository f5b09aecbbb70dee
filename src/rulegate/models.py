"""Rule tree data models: groups, subgroups, rules, actions, and execution results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from rulegate.core.coercion import coerce_value
from rulegate.exceptions import RuleDefinitionError

# Type tags used by rule documents and relational stores, lower-cased.
_VALUE_TYPE_ALIASES: dict[str, str] = {
    "str": "string",
    "text": "string",
    "varchar": "string",
    "java.lang.string": "string",
    "int": "integer",
    "java.lang.integer": "integer",
    "bigint": "long",
    "java.lang.long": "long",
    "java.lang.float": "float",
    "decimal": "double",
    "number": "double",
    "bigdecimal": "double",
    "java.lang.double": "double",
    "java.math.bigdecimal": "double",
    "datetime": "date",
    "java.util.date": "date",
    "bool": "boolean",
    "java.lang.boolean": "boolean",
}


class ValueType(str, Enum):
    """Declared type of an operand or literal.

    Loaders may use any alias in ``_VALUE_TYPE_ALIASES``; lookup is
    case-insensitive. Unknown tags raise ``ValueError``.
    """

    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    DATE = "date"
    BOOLEAN = "boolean"

    @classmethod
    def _missing_(cls, value: object) -> ValueType | None:
        if isinstance(value, str):
            key = value.strip().lower()
            key = _VALUE_TYPE_ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        return None

    @property
    def is_numeric(self) -> bool:
        return self in (ValueType.INTEGER, ValueType.LONG, ValueType.FLOAT, ValueType.DOUBLE)


class LogicalOperator(str, Enum):
    """Operator combining two verdicts."""

    AND = "and"
    OR = "or"

    @classmethod
    def _missing_(cls, value: object) -> LogicalOperator | None:
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        return None


class ExecuteIf(str, Enum):
    """Group outcome an action (or a dependent group) is conditioned on."""

    PASSED = "passed"
    FAILED = "failed"
    ALWAYS = "always"

    @classmethod
    def _missing_(cls, value: object) -> ExecuteIf | None:
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        return None


class Verdict(IntEnum):
    """Encoded outcome. The integer values are used by the combinators."""

    PASSED = 0
    FAILED = 1

    @classmethod
    def of(cls, passed: bool) -> Verdict:
        return cls.PASSED if passed else cls.FAILED


class OutputType(str, Enum):
    """Which results a report should include."""

    FAILED = "failed"
    PASSED = "passed"
    ALL = "all"


@dataclass(frozen=True)
class InvalidConversion:
    """Placeholder stored in a result when an operand could not be coerced."""

    value_type: ValueType | str

    def __str__(self) -> str:
        tag = self.value_type.value if isinstance(self.value_type, ValueType) else self.value_type
        return f"invalid type conversion: [{tag}]"


@dataclass(frozen=True)
class Parameter:
    """A literal argument passed to a check, action, or accessor.

    ``typed_value`` holds ``value`` coerced once to ``value_type`` so that
    evaluation never re-parses literals.
    """

    value_type: ValueType
    value: str | None
    is_setter_value: bool = False
    typed_value: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            typed = coerce_value(self.value, self.value_type)
        except (TypeError, ValueError) as exc:
            raise RuleDefinitionError(
                f"Literal {self.value!r} is not a valid {self.value_type.value}"
            ) from exc
        object.__setattr__(self, "typed_value", typed)


@dataclass(frozen=True)
class RuleObject:
    """Describes how to obtain one operand of a rule from the target object."""

    accessor: str
    selector: str | None = None
    value_type: ValueType = ValueType.STRING
    selector_type: ValueType = ValueType.STRING
    target_type: str = ""


@dataclass(frozen=True)
class RuleMessage:
    """Message template attached to a rule for one verdict."""

    verdict: Verdict
    text: str


@dataclass(frozen=True)
class Rule:
    """A named boolean check applied to one or two operands."""

    id: str
    check: str
    objects: list[RuleObject]
    description: str = ""
    expected: Parameter | None = None
    parameters: list[Parameter] = field(default_factory=list)
    messages: list[RuleMessage] = field(default_factory=list)

    def message_for(self, verdict: Verdict) -> str | None:
        """Return the template for ``verdict``, or None if none is configured."""
        for message in self.messages:
            if message.verdict == verdict:
                return message.text
        return None


@dataclass(frozen=True)
class RuleSubGroup:
    """Rules combined by ``intra_operator``; chained into the group by ``inter_operator``."""

    id: str
    rules: list[Rule] = field(default_factory=list)
    description: str = ""
    intra_operator: LogicalOperator = LogicalOperator.AND
    inter_operator: LogicalOperator = LogicalOperator.AND


@dataclass(frozen=True)
class ActionObject:
    """Getter or setter used by an action to read or write the target object."""

    accessor: str
    selector: str | None = None
    value_type: ValueType | None = None
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class Action:
    """A registered function run after group evaluation, conditioned on its verdict."""

    id: str
    function: str
    execute_if: ExecuteIf = ExecuteIf.ALWAYS
    description: str = ""
    getters: list[ActionObject] = field(default_factory=list)
    setter: ActionObject | None = None
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class RuleGroup:
    """Top-level rule scenario owning subgroups and post-evaluation actions."""

    id: str
    subgroups: list[RuleSubGroup] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    description: str = ""
    valid_from: str | None = None
    valid_until: str | None = None
    dependent_group_id: str | None = None
    dependent_execute_if: ExecuteIf = ExecuteIf.PASSED
    output_after_actions: bool = False
    preserve_results: bool = True

    @property
    def number_of_rules(self) -> int:
        return sum(len(sg.rules) for sg in self.subgroups)

    @property
    def number_of_actions(self) -> int:
        return len(self.actions)


@dataclass(frozen=True)
class ReferenceField:
    """Describes a field available to rule authors. Not used during evaluation."""

    name: str
    name_descriptive: str = ""
    description: str = ""
    type_id: int | None = None


@dataclass(frozen=True)
class RuleExecutionResult:
    """Immutable snapshot of one rule evaluation."""

    timestamp: str
    rule: Rule
    object_label: str
    group_id: str
    subgroup_id: str
    verdict: Verdict
    operand1: Any = None
    operand2: Any = None

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def failed(self) -> bool:
        return self.verdict == Verdict.FAILED


__all__ = [
    "ValueType",
    "LogicalOperator",
    "ExecuteIf",
    "Verdict",
    "OutputType",
    "InvalidConversion",
    "Parameter",
    "RuleObject",
    "RuleMessage",
    "Rule",
    "RuleSubGroup",
    "ActionObject",
    "Action",
    "RuleGroup",
    "ReferenceField",
    "RuleExecutionResult",
]
