"""Tests for overload resolution in the check and action registries."""

from __future__ import annotations

import pytest

from rulegate.engine.registry import ActionRegistry, CheckRegistry
from rulegate.exceptions import (
    ActionInvocationError,
    CheckInvocationError,
    CheckNotFoundError,
    NoMatchingSignatureError,
)


def _pair_int(value: int, other: int) -> str:
    return "int"


def _pair_float(value: float, other: float) -> str:
    return "float"


def _pair_object(value: object, other: object) -> str:
    return "object"


def _pair_untyped(value, other):
    return "untyped"


def _pair_str_first(value: str, other: str) -> str:
    return "first"


def _pair_str_second(value: str, other: str) -> str:
    return "second"


def _triple_str(value: str, other: str, ignore_case: bool) -> str:
    return "triple"


def _with_default(value: str, flag: bool = False) -> str:
    return f"default:{flag}"


def _optional(value: str | None) -> str:
    return "optional"


def _raises(value: int) -> bool:
    raise ZeroDivisionError("boom")


def _truthy(value: int) -> int:
    return value


class TestOverloadResolution:
    def test_exact_beats_widening(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_float)
        registry.register("cmp", _pair_int)
        assert registry.call("cmp", 1, 2) == "int"

    def test_widening_beats_object(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_object)
        registry.register("cmp", _pair_float)
        assert registry.call("cmp", 1, 2) == "float"

    def test_float_arguments_skip_int_overload(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_int)
        registry.register("cmp", _pair_float)
        assert registry.call("cmp", 1.5, 2) == "float"

    def test_untyped_treated_like_object(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_untyped)
        assert registry.call("cmp", [1], {"a": 1}) == "untyped"

    def test_bool_never_matches_numbers(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_int)
        registry.register("cmp", _pair_float)
        with pytest.raises(NoMatchingSignatureError):
            registry.call("cmp", True, 1)

    def test_bool_falls_back_to_object(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_int)
        registry.register("cmp", _pair_object)
        assert registry.call("cmp", True, 1) == "object"

    def test_tie_goes_to_first_registered(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_str_first)
        registry.register("cmp", _pair_str_second)
        assert registry.call("cmp", "a", "b") == "first"

    def test_arity_selects_overload(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_str_first)
        registry.register("cmp", _triple_str)
        assert registry.call("cmp", "a", "b") == "first"
        assert registry.call("cmp", "a", "b", True) == "triple"

    def test_default_parameters_widen_arity(self) -> None:
        registry = CheckRegistry()
        registry.register("flagged", _with_default)
        assert registry.call("flagged", "a") == "default:False"
        assert registry.call("flagged", "a", True) == "default:True"
        with pytest.raises(NoMatchingSignatureError):
            registry.call("flagged", "a", True, 3)

    def test_optional_accepts_none(self) -> None:
        registry = CheckRegistry()
        registry.register("opt", _optional)
        assert registry.call("opt", None) == "optional"
        assert registry.call("opt", "x") == "optional"

    def test_none_rejected_by_plain_annotation(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_str_first)
        with pytest.raises(NoMatchingSignatureError):
            registry.call("cmp", None, "b")

    def test_selection_is_cached(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_int)
        first = registry.select("cmp", (1, 2))
        assert registry.select("cmp", (3, 4)) is first

    def test_register_invalidates_cache(self) -> None:
        registry = CheckRegistry()
        registry.register("cmp", _pair_object)
        assert registry.call("cmp", 1, 2) == "object"
        registry.register("cmp", _pair_int)
        assert registry.call("cmp", 1, 2) == "int"


class TestCheckRegistryErrors:
    def test_unknown_name(self) -> None:
        with pytest.raises(CheckNotFoundError, match="no_such_check"):
            CheckRegistry().invoke("no_such_check", 1)

    def test_not_found_is_invocation_error(self) -> None:
        assert issubclass(CheckNotFoundError, CheckInvocationError)
        assert issubclass(NoMatchingSignatureError, CheckInvocationError)

    def test_raising_implementation(self) -> None:
        registry = CheckRegistry()
        registry.register("boom", _raises)
        with pytest.raises(CheckInvocationError) as exc_info:
            registry.invoke("boom", 1)
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_invoke_returns_bool(self) -> None:
        registry = CheckRegistry()
        registry.register("truthy", _truthy)
        assert registry.invoke("truthy", 3) is True
        assert registry.invoke("truthy", 0) is False


class TestDottedPaths:
    def test_colon_path(self) -> None:
        registry = CheckRegistry()
        assert registry.invoke("rulegate.checks.numeric:is_even", 4) is True

    def test_dot_path(self) -> None:
        registry = CheckRegistry()
        assert registry.invoke("rulegate.checks.numeric.is_odd", 4) is False

    def test_imported_once(self) -> None:
        registry = CheckRegistry()
        first = registry.overloads("rulegate.checks.numeric:is_even")
        assert registry.overloads("rulegate.checks.numeric:is_even") is first

    def test_missing_module(self) -> None:
        with pytest.raises(CheckNotFoundError, match="Cannot import"):
            CheckRegistry().invoke("rulegate.nowhere:check", 1)

    def test_missing_attribute(self) -> None:
        with pytest.raises(CheckNotFoundError):
            CheckRegistry().invoke("rulegate.checks.numeric:is_prime", 7)

    def test_not_callable(self) -> None:
        with pytest.raises(CheckNotFoundError, match="callable"):
            CheckRegistry().invoke("rulegate.core.coercion:DATE_FORMAT", 1)


class TestActionRegistry:
    def test_errors_are_action_errors(self) -> None:
        registry = ActionRegistry()
        registry.register("boom", _raises)
        with pytest.raises(ActionInvocationError):
            registry.call("missing", 1)
        with pytest.raises(ActionInvocationError):
            registry.call("boom", "not an int")
        with pytest.raises(ActionInvocationError):
            registry.call("boom", 1)

    def test_names_sorted(self) -> None:
        registry = ActionRegistry()
        registry.register("b", _truthy)
        registry.register("a", _truthy)
        assert registry.names() == ["a", "b"]
