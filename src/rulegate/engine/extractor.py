"""Value extraction: read typed operands from target objects through named accessors."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from rulegate.core.coercion import coerce_value
from rulegate.exceptions import ExtractionError
from rulegate.models import RuleObject, ValueType

log = logging.getLogger(__name__)

Accessor = Callable[..., Any]

GET_FIELD_VALUE = "get_field_value"
SET_FIELD_VALUE = "set_field_value"


def get_field_value(target: Any, field_name: str) -> Any:
    """Read ``field_name`` from a mapping key or an attribute."""
    if isinstance(target, Mapping):
        return target[field_name]
    return getattr(target, field_name)


def set_field_value(target: Any, field_name: str, value: Any) -> None:
    """Write ``value`` to a mapping key or an attribute."""
    if isinstance(target, MutableMapping):
        target[field_name] = value
    else:
        setattr(target, field_name, value)


class AccessorRegistry:
    """Named accessors callable as ``fn(target, *args)``.

    Names not registered here fall back to a method (or attribute) of the
    same name on the target object.
    """

    def __init__(self) -> None:
        self._accessors: dict[str, Accessor] = {}

    def register(self, name: str, fn: Accessor) -> None:
        if name in self._accessors:
            log.warning("Accessor %r already registered, overwriting", name)
        self._accessors[name] = fn

    def get(self, name: str) -> Accessor | None:
        return self._accessors.get(name)

    def names(self) -> list[str]:
        return sorted(self._accessors)


def default_accessor_registry() -> AccessorRegistry:
    """Registry holding the mapping/attribute field accessors."""
    registry = AccessorRegistry()
    registry.register(GET_FIELD_VALUE, get_field_value)
    registry.register(SET_FIELD_VALUE, set_field_value)
    return registry


class ValueExtractor:
    """Obtains operand values from a target object as described by a ``RuleObject``."""

    def __init__(self, accessors: AccessorRegistry | None = None) -> None:
        self._accessors = accessors or default_accessor_registry()

    @property
    def accessors(self) -> AccessorRegistry:
        return self._accessors

    def extract(self, target: Any, rule_object: RuleObject) -> Any:
        """Read and coerce the operand described by ``rule_object``.

        Raises:
            ExtractionError: If the accessor is missing, the selector does not
                match its declared type, the accessor raises, or the value
                cannot be coerced to ``rule_object.value_type``.
        """
        args: list[Any] = []
        if rule_object.selector is not None:
            args.append(self._coerce_selector(rule_object.selector, rule_object.selector_type))
        raw = self.call_accessor(target, rule_object.accessor, args)
        return self.coerce(raw, rule_object.value_type, source=rule_object.selector)

    def read(
        self, target: Any, accessor: str, args: list[Any], value_type: ValueType | None
    ) -> Any:
        """Call ``accessor`` with already-typed ``args`` and coerce the result, if typed."""
        raw = self.call_accessor(target, accessor, args)
        return self.coerce(raw, value_type, source=args[0] if args else accessor)

    def call_accessor(self, target: Any, name: str, args: list[Any]) -> Any:
        """Invoke accessor ``name`` on ``target`` with ``args``."""
        fn = self._accessors.get(name)
        try:
            if fn is not None:
                return fn(target, *args)
            member = getattr(target, name)
        except AttributeError as exc:
            raise ExtractionError(
                f"{type(target).__name__} has no accessor {name!r}",
                reason="missing",
            ) from exc
        except (KeyError, IndexError) as exc:
            raise ExtractionError(
                f"Accessor {name!r} found no value for {args!r}",
                reason="missing",
            ) from exc
        except Exception as exc:
            raise ExtractionError(
                f"Accessor {name!r} raised {type(exc).__name__}: {exc}",
                reason="invocation",
            ) from exc

        if not callable(member):
            if args:
                raise ExtractionError(
                    f"Attribute {name!r} of {type(target).__name__} is not callable",
                    reason="argument",
                )
            return member
        try:
            return member(*args)
        except TypeError as exc:
            raise ExtractionError(
                f"Accessor {name!r} rejected arguments {args!r}: {exc}",
                reason="argument",
            ) from exc
        except Exception as exc:
            raise ExtractionError(
                f"Accessor {name!r} raised {type(exc).__name__}: {exc}",
                reason="invocation",
            ) from exc

    @staticmethod
    def coerce(raw: Any, value_type: ValueType | None, *, source: Any = None) -> Any:
        if value_type is None:
            return raw
        try:
            return coerce_value(raw, value_type)
        except (TypeError, ValueError) as exc:
            raise ExtractionError(
                f"Value {raw!r} of {source!r} is not a valid {value_type.value}",
                reason="coercion",
                value_type=value_type.value,
            ) from exc

    @staticmethod
    def _coerce_selector(selector: str, selector_type: ValueType) -> Any:
        try:
            return coerce_value(selector, selector_type)
        except (TypeError, ValueError) as exc:
            raise ExtractionError(
                f"Selector {selector!r} is not a valid {selector_type.value}",
                reason="argument",
            ) from exc
