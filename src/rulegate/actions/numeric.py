"""Numeric actions."""

from __future__ import annotations


def add_value_integer(value: int, amount: int) -> int:
    return value + amount


def add_value(value: float, amount: float) -> float:
    return value + amount


def subtract_value_integer(value: int, amount: int) -> int:
    return value - amount


def subtract_value(value: float, amount: float) -> float:
    return value - amount


def multiply_value_integer(value: int, factor: int) -> int:
    return value * factor


def multiply_value(value: float, factor: float) -> float:
    return value * factor


def set_numeric_value(value: float) -> float:
    return value


ACTIONS = [
    ("add_value", add_value_integer),
    ("add_value", add_value),
    ("subtract_value", subtract_value_integer),
    ("subtract_value", subtract_value),
    ("multiply_value", multiply_value_integer),
    ("multiply_value", multiply_value),
    ("set_numeric_value", set_numeric_value),
]
