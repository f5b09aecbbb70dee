"""Equality and ordering checks.

Each name has several overloads; the registry picks one from the operand
types. The trailing ``object`` overload of ``equals`` compares string forms
so an extracted ``4`` equals the literal ``"4"``.
"""

from __future__ import annotations

from datetime import date

from rulegate.core.coercion import coerce_value


def _text(value: object) -> str:
    return coerce_value(value, "string")


# ── equals / not_equals ─────────────────────────────────────────────


def equals_integer(value: int, other: int) -> bool:
    return value == other


def equals_number(value: float, other: float) -> bool:
    return value == other


def equals_string(value: str, other: str) -> bool:
    return value == other


def equals_string_ignore_case(value: str, other: str, ignore_case: bool) -> bool:
    if ignore_case:
        return value.casefold() == other.casefold()
    return value == other


def equals_date(value: date, other: date) -> bool:
    return value == other


def equals_boolean(value: bool, other: bool) -> bool:
    return value is other


def equals_any(value: object, other: object) -> bool:
    if value is None or other is None:
        return value is None and other is None
    return _text(value) == _text(other)


def not_equals_number(value: float, other: float) -> bool:
    return value != other


def not_equals_string(value: str, other: str) -> bool:
    return value != other


def not_equals_string_ignore_case(value: str, other: str, ignore_case: bool) -> bool:
    return not equals_string_ignore_case(value, other, ignore_case)


def not_equals_any(value: object, other: object) -> bool:
    return not equals_any(value, other)


# ── Ordering ────────────────────────────────────────────────────────


def greater_number(value: float, other: float) -> bool:
    return value > other


def greater_date(value: date, other: date) -> bool:
    return value > other


def greater_string(value: str, other: str) -> bool:
    return value > other


def greater_or_equal_number(value: float, other: float) -> bool:
    return value >= other


def greater_or_equal_date(value: date, other: date) -> bool:
    return value >= other


def less_number(value: float, other: float) -> bool:
    return value < other


def less_date(value: date, other: date) -> bool:
    return value < other


def less_string(value: str, other: str) -> bool:
    return value < other


def less_or_equal_number(value: float, other: float) -> bool:
    return value <= other


def less_or_equal_date(value: date, other: date) -> bool:
    return value <= other


def between_number(value: float, low: float, high: float) -> bool:
    """Inclusive on both ends."""
    return low <= value <= high


def between_date(value: date, low: date, high: date) -> bool:
    return low <= value <= high


CHECKS = [
    ("equals", equals_integer),
    ("equals", equals_number),
    ("equals", equals_string),
    ("equals", equals_string_ignore_case),
    ("equals", equals_date),
    ("equals", equals_boolean),
    ("equals", equals_any),
    ("not_equals", not_equals_number),
    ("not_equals", not_equals_string),
    ("not_equals", not_equals_string_ignore_case),
    ("not_equals", not_equals_any),
    ("greater", greater_number),
    ("greater", greater_date),
    ("greater", greater_string),
    ("greater_or_equal", greater_or_equal_number),
    ("greater_or_equal", greater_or_equal_date),
    ("less", less_number),
    ("less", less_date),
    ("less", less_string),
    ("less_or_equal", less_or_equal_number),
    ("less_or_equal", less_or_equal_date),
    ("between", between_number),
    ("between", between_date),
]
