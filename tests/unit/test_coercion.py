"""Tests for value coercion."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from rulegate.core.coercion import coerce_value, parse_date


class TestParseDate:
    def test_plain_date(self) -> None:
        assert parse_date("2024-01-31") == date(2024, 1, 31)

    def test_timestamp_keeps_date_part(self) -> None:
        assert parse_date("2024-01-31 10:15:00") == date(2024, 1, 31)

    def test_iso_timestamp(self) -> None:
        assert parse_date("2024-01-31T10:15") == date(2024, 1, 31)

    def test_invalid_date(self) -> None:
        with pytest.raises(ValueError):
            parse_date("2024-02-30")


class TestCoerceValue:
    def test_none_passes_through(self) -> None:
        for tag in ("string", "integer", "double", "date", "boolean"):
            assert coerce_value(None, tag) is None

    def test_string_of_boolean_is_lowercase(self) -> None:
        assert coerce_value(True, "string") == "true"
        assert coerce_value(False, "string") == "false"

    def test_string_of_datetime(self) -> None:
        assert coerce_value(datetime(2024, 1, 31, 8, 30), "string") == "2024-01-31"

    def test_integer_from_text(self) -> None:
        assert coerce_value(" 42 ", "integer") == 42

    def test_integer_from_integral_float(self) -> None:
        assert coerce_value(4.0, "long") == 4

    def test_integer_rejects_fraction(self) -> None:
        with pytest.raises(ValueError):
            coerce_value(4.5, "integer")

    def test_integer_rejects_boolean(self) -> None:
        with pytest.raises(TypeError):
            coerce_value(True, "integer")

    def test_integer_rejects_text(self) -> None:
        with pytest.raises(ValueError):
            coerce_value("forty", "integer")

    def test_double(self) -> None:
        assert coerce_value("1.5", "double") == 1.5
        assert coerce_value(3, "float") == 3.0

    def test_date_from_datetime(self) -> None:
        assert coerce_value(datetime(2024, 1, 31, 8, 30), "date") == date(2024, 1, 31)

    def test_boolean_words(self) -> None:
        assert coerce_value("Yes", "boolean") is True
        assert coerce_value("0", "boolean") is False
        assert coerce_value(1, "boolean") is True

    def test_boolean_rejects_unknown_word(self) -> None:
        with pytest.raises(ValueError):
            coerce_value("maybe", "boolean")

    def test_unknown_tag(self) -> None:
        with pytest.raises(KeyError):
            coerce_value("x", "decimal128")
