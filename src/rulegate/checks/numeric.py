"""Numeric and null/empty checks."""

from __future__ import annotations


def is_even(value: int) -> bool:
    return value % 2 == 0


def is_odd(value: int) -> bool:
    return value % 2 != 0


def is_zero(value: float) -> bool:
    return value == 0


def is_negative(value: float) -> bool:
    return value < 0


def is_null(value: object) -> bool:
    return value is None


def is_not_null(value: object) -> bool:
    return value is not None


def is_empty(value: object) -> bool:
    """None, or a string holding only whitespace."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def is_not_empty(value: object) -> bool:
    return not is_empty(value)


CHECKS = [
    ("is_even", is_even),
    ("is_odd", is_odd),
    ("is_zero", is_zero),
    ("is_negative", is_negative),
    ("is_null", is_null),
    ("is_not_null", is_not_null),
    ("is_empty", is_empty),
    ("is_not_empty", is_not_empty),
]
