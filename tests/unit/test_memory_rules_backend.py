"""Tests for MemoryRulesBackend."""

from __future__ import annotations

from datetime import date

import pytest

from rulegate.backends import IRulesBackend, create_rules_backend
from rulegate.backends.file_backend import FileRulesBackend
from rulegate.backends.memory_backend import MemoryRulesBackend
from rulegate.core.config import RulesConfig
from rulegate.models import ReferenceField, RuleGroup


class TestMemoryRulesBackend:
    def test_list_empty(self) -> None:
        assert MemoryRulesBackend().list_groups() == []

    def test_declaration_order(self) -> None:
        backend = MemoryRulesBackend([RuleGroup(id="b"), RuleGroup(id="a")])
        backend.add_group(RuleGroup(id="c"))
        assert [g.id for g in backend.list_groups()] == ["b", "a", "c"]

    def test_replaced_group_keeps_position(self) -> None:
        backend = MemoryRulesBackend([RuleGroup(id="a"), RuleGroup(id="b")])
        backend.add_group(RuleGroup(id="a", description="new"))
        groups = backend.list_groups()
        assert [g.id for g in groups] == ["a", "b"]
        assert groups[0].description == "new"

    def test_active_only(self) -> None:
        backend = MemoryRulesBackend(
            [RuleGroup(id="old", valid_until="2023-12-31"), RuleGroup(id="now")]
        )
        today = date(2024, 6, 15)
        assert [g.id for g in backend.list_groups(today=today)] == ["now"]
        assert len(backend.list_groups(active_only=False, today=today)) == 2

    def test_get_group(self) -> None:
        backend = MemoryRulesBackend([RuleGroup(id="a")])
        assert backend.get_group("a").id == "a"
        with pytest.raises(KeyError):
            backend.get_group("b")

    def test_reference_fields(self) -> None:
        backend = MemoryRulesBackend(reference_fields=[ReferenceField(name="age")])
        assert [f.name for f in backend.list_reference_fields()] == ["age"]

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryRulesBackend(), IRulesBackend)


class TestCreateRulesBackend:
    def test_memory(self) -> None:
        assert isinstance(create_rules_backend(RulesConfig(backend="memory")), MemoryRulesBackend)

    def test_file(self, tmp_path) -> None:
        backend = create_rules_backend(RulesConfig(backend="file", rules_path=tmp_path))
        assert isinstance(backend, FileRulesBackend)

    def test_unknown(self) -> None:
        config = RulesConfig.model_construct(backend="ldap")
        with pytest.raises(ValueError, match="Unknown rules backend"):
            create_rules_backend(config)
