"""Coercion of raw values and literals to declared value types.

Type tags are looked up by their plain string value (``ValueType.INTEGER.value``
is ``"integer"``), so this module does not need to import the models.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from typing import Any

DATE_FORMAT = "%Y-%m-%d"

_TRUE_STRINGS = frozenset({"true", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "0"})


def parse_date(text: str) -> date:
    """Parse ``yyyy-MM-dd`` (optionally followed by a time part) into a date.

    Raises:
        ValueError: If ``text`` does not start with a valid calendar date.
    """
    stripped = text.strip()
    # Timestamps such as "2024-01-31 10:00:00" or ISO "2024-01-31T10:00" keep the date
    if len(stripped) > 10 and stripped[10] in " T":
        stripped = stripped[:10]
    return datetime.strptime(stripped, DATE_FORMAT).date()


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    return str(value)


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} has a fractional part")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"cannot convert {type(value).__name__} to integer")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"cannot convert {type(value).__name__} to float")


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value)
    raise TypeError(f"cannot convert {type(value).__name__} to date")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _TRUE_STRINGS:
            return True
        if key in _FALSE_STRINGS:
            return False
    raise ValueError(f"cannot convert {value!r} to boolean")


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "string": _to_string,
    "integer": _to_integer,
    "long": _to_integer,
    "float": _to_float,
    "double": _to_float,
    "date": _to_date,
    "boolean": _to_boolean,
}


def coerce_value(value: Any, value_type: str) -> Any:
    """Coerce ``value`` to ``value_type``. ``None`` passes through unchanged.

    Raises:
        KeyError: If ``value_type`` is not a known type tag.
        TypeError, ValueError: If the value cannot be represented in that type.
    """
    if value is None:
        return None
    tag = getattr(value_type, "value", value_type)
    return _COERCERS[tag](value)
