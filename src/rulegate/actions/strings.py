"""String actions. Each returns the new value for the action's setter."""

from __future__ import annotations

import re

from rulegate.core.coercion import coerce_value


def set_value(value: str) -> str:
    return value


def replace_value(value: str, pattern: str, replacement: str) -> str:
    """Replace every regex match of ``pattern``."""
    return re.sub(pattern, replacement, value)


def substring_until(value: str, until: str) -> str:
    """Text before the first ``until``, stripped; the whole value if absent."""
    pos = value.find(until)
    if pos > -1:
        return value[:pos].strip()
    return value


def substring_from(value: str, begin: int) -> str:
    return value[begin:]


def substring_range(value: str, begin: int, end: int) -> str:
    return value[begin:end]


def concat_values(value: str, other: object, separator: str = "") -> str:
    return f"{value}{separator}{coerce_value(other, 'string')}"


def append_value(value: str, suffix: object, separator: str = "") -> str:
    return f"{value}{separator}{coerce_value(suffix, 'string')}"


def prepend_value(value: str, prefix: object, separator: str = "") -> str:
    return f"{coerce_value(prefix, 'string')}{separator}{value}"


def add_leading_zeros(value: str, length: int) -> str:
    return value.rjust(length, "0")


def add_leading_spaces(value: str, length: int) -> str:
    return value.rjust(length, " ")


def trim_value(value: str) -> str:
    return value.strip()


def upper_case_value(value: str) -> str:
    return value.upper()


def lower_case_value(value: str) -> str:
    return value.lower()


ACTIONS = [
    ("set_value", set_value),
    ("replace_value", replace_value),
    ("substring_value", substring_until),
    ("substring_value", substring_from),
    ("substring_value", substring_range),
    ("concat_values", concat_values),
    ("append_value", append_value),
    ("prepend_value", prepend_value),
    ("add_leading_zeros", add_leading_zeros),
    ("add_leading_spaces", add_leading_spaces),
    ("trim_value", trim_value),
    ("upper_case_value", upper_case_value),
    ("lower_case_value", lower_case_value),
]
