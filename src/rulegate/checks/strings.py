"""String checks. A missing (None) operand never satisfies a check."""

from __future__ import annotations

import re


def _fold(value: str, ignore_case: bool) -> str:
    return value.casefold() if ignore_case else value


def starts_with(value: str | None, prefix: str | None, ignore_case: bool = False) -> bool:
    if value is None or prefix is None:
        return False
    return _fold(value, ignore_case).startswith(_fold(prefix, ignore_case))


def ends_with(value: str | None, suffix: str | None, ignore_case: bool = False) -> bool:
    if value is None or suffix is None:
        return False
    return _fold(value, ignore_case).endswith(_fold(suffix, ignore_case))


def not_ends_with(value: str | None, suffix: str | None, ignore_case: bool = False) -> bool:
    if value is None or suffix is None:
        return False
    return not _fold(value, ignore_case).endswith(_fold(suffix, ignore_case))


def contains(value: str | None, part: str | None, ignore_case: bool = False) -> bool:
    if value is None or part is None:
        return False
    return _fold(part, ignore_case) in _fold(value, ignore_case)


def not_contains(value: str | None, part: str | None, ignore_case: bool = False) -> bool:
    if value is None or part is None:
        return False
    return _fold(part, ignore_case) not in _fold(value, ignore_case)


def matches(value: str | None, pattern: str) -> bool:
    """Whole-value regular expression match."""
    if value is None:
        return False
    return re.fullmatch(pattern, value) is not None


def length_equals(value: str | None, length: int) -> bool:
    if value is None:
        return False
    return len(value) == length


def is_numeric(value: str | None) -> bool:
    if value is None or not value.strip():
        return False
    try:
        float(value)
    except ValueError:
        return False
    return True


def is_numeric_number(value: float) -> bool:
    return True


def is_upper_case(value: str | None) -> bool:
    if value is None:
        return False
    return value == value.upper()


def is_lower_case(value: str | None) -> bool:
    if value is None:
        return False
    return value == value.lower()


def is_in_list(value: str | None, items: str, ignore_case: bool = False) -> bool:
    """``items`` is a comma-separated list; entries are stripped."""
    if value is None:
        return False
    candidates = {_fold(item.strip(), ignore_case) for item in items.split(",")}
    return _fold(value, ignore_case) in candidates


def is_in_list_number(value: float, items: str) -> bool:
    candidates: set[float] = set()
    for item in items.split(","):
        try:
            candidates.add(float(item))
        except ValueError:
            continue
    return value in candidates


CHECKS = [
    ("starts_with", starts_with),
    ("ends_with", ends_with),
    ("not_ends_with", not_ends_with),
    ("contains", contains),
    ("not_contains", not_contains),
    ("matches", matches),
    ("length_equals", length_equals),
    ("is_numeric", is_numeric),
    ("is_numeric", is_numeric_number),
    ("is_upper_case", is_upper_case),
    ("is_lower_case", is_lower_case),
    ("is_in_list", is_in_list),
    ("is_in_list", is_in_list_number),
]
