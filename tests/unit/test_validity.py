"""Tests for the validity-window gate."""

from __future__ import annotations

from datetime import date

import pytest

from rulegate.engine.validity import filter_active_groups, is_group_active, parse_bound
from rulegate.exceptions import ValidityParseError
from rulegate.models import RuleGroup


class TestParseBound:
    def test_open_bounds(self) -> None:
        assert parse_bound(None) is None
        assert parse_bound("") is None
        assert parse_bound("  ") is None

    def test_date(self) -> None:
        assert parse_bound("2024-06-15") == date(2024, 6, 15)

    def test_time_of_day_dropped(self) -> None:
        assert parse_bound("2024-06-01 08:30:00") == date(2024, 6, 1)
        assert parse_bound("2024-06-01T08:30") == date(2024, 6, 1)

    def test_malformed(self) -> None:
        with pytest.raises(ValidityParseError):
            parse_bound("15.06.2024")


class TestIsGroupActive:
    def test_bounds_inclusive(self, today: date) -> None:
        group = RuleGroup(id="g", valid_from="2024-06-15", valid_until="2024-06-15")
        assert is_group_active(group, today)

    def test_timestamp_bounds(self, today: date) -> None:
        group = RuleGroup(id="g", valid_from="2024-06-01 08:30:00", valid_until="2024-12-31 23:59:59")
        assert is_group_active(group, today)
        assert is_group_active(RuleGroup(id="g", valid_until="2024-06-15 00:00:01"), today)

    def test_before_window(self, today: date) -> None:
        assert not is_group_active(RuleGroup(id="g", valid_from="2024-06-16"), today)

    def test_after_window(self, today: date) -> None:
        assert not is_group_active(RuleGroup(id="g", valid_until="2024-06-14"), today)

    def test_no_bounds_always_active(self, today: date) -> None:
        assert is_group_active(RuleGroup(id="g"), today)

    def test_malformed_raises(self, today: date) -> None:
        with pytest.raises(ValidityParseError):
            is_group_active(RuleGroup(id="g", valid_until="soon"), today)


class TestFilterActiveGroups:
    def test_keeps_order_and_drops_inactive(self, today: date) -> None:
        groups = [
            RuleGroup(id="a"),
            RuleGroup(id="b", valid_until="2020-01-01"),
            RuleGroup(id="c", valid_from="2024-01-01"),
            RuleGroup(id="d", valid_from="not-a-date"),
        ]
        assert [g.id for g in filter_active_groups(groups, today)] == ["a", "c"]

    def test_malformed_window_logged(self, today: date, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="rulegate.engine.validity"):
            filter_active_groups([RuleGroup(id="d", valid_from="not-a-date")], today)
        assert "Excluding group d" in caplog.text
