"""Date checks."""

from __future__ import annotations

from datetime import date


def is_before(value: date, other: date) -> bool:
    return value < other


def is_after(value: date, other: date) -> bool:
    return value > other


def is_weekday(value: date) -> bool:
    """Monday through Friday."""
    return value.weekday() < 5


CHECKS = [
    ("is_before", is_before),
    ("is_after", is_after),
    ("is_weekday", is_weekday),
]
