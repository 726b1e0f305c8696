"""
Unit tests for core/models.py and core/enums.py
"""

import pytest

from affected.core.enums import AffectedMode, ChangeClass, CompareMode, EngineState
from affected.core import models
from affected.core.models import (
    ALL_CHANGED,
    ChangeSet,
    Module,
    normalize_path,
    path_segments,
)


class TestEnums:
    """Test enumeration values."""

    def test_mode_values(self):
        assert AffectedMode.ONLY_DIRECT.value == "ONLY_DIRECT"
        assert AffectedMode.INCLUDE_DEPENDENTS.value == "INCLUDE_DEPENDENTS"
        assert len(list(AffectedMode)) == 2

    def test_change_class_values(self):
        assert {c.value for c in ChangeClass} == {"global", "ignored", "candidate"}

    def test_compare_modes(self):
        assert [m.value for m in CompareMode] == ["COMMIT", "TWO_DOT", "THREE_DOT"]

    def test_engine_states(self):
        assert EngineState.INIT.value == "init"
        assert EngineState.FINALIZED.value == "finalized"


class TestNormalizePath:
    """Test path normalisation."""

    def test_root_spellings(self):
        assert normalize_path("") == ""
        assert normalize_path(".") == ""
        assert normalize_path("./") == ""
        assert normalize_path(None) == ""

    def test_strips_dot_prefix_and_trailing_slash(self):
        assert normalize_path("./moduleA/") == "moduleA"
        assert normalize_path("moduleA//src/File.x") == "moduleA/src/File.x"

    def test_backslashes_on_windows_hosts(self, monkeypatch):
        monkeypatch.setattr(models, "BACKSLASH_IS_SEPARATOR", True)
        assert normalize_path("moduleA\\src\\File.x") == "moduleA/src/File.x"

    def test_backslash_is_a_filename_character_on_posix(self, monkeypatch):
        monkeypatch.setattr(models, "BACKSLASH_IS_SEPARATOR", False)
        assert normalize_path("moduleA/odd\\name.txt") == "moduleA/odd\\name.txt"
        assert path_segments("moduleA/odd\\name.txt") == ("moduleA", "odd\\name.txt")
        assert Module("A", "moduleA").owns("moduleA/odd\\name.txt")

    def test_segments(self):
        assert path_segments("a/b/c.txt") == ("a", "b", "c.txt")
        assert path_segments("") == ()


class TestModule:
    """Test Module dataclass."""

    def test_directory_normalised(self):
        module = Module("A", "./moduleA/")
        assert module.directory == "moduleA"
        assert not module.is_root

    def test_dependencies_frozen(self):
        module = Module("B", "moduleB", {"A"})
        assert module.dependencies == frozenset({"A"})

    def test_root_module(self):
        root = Module(":", ".")
        assert root.is_root
        assert root.owns("anything/at/all.txt")

    def test_owns_uses_segments_not_string_prefix(self):
        module = Module("A", "moduleA")
        assert module.owns("moduleA/src/File.x")
        assert not module.owns("moduleAB/src/File.x")

    def test_task_path(self):
        assert Module(":", "").task_path("test") == ":test"
        assert Module(":app", "app").task_path("test") == ":app:test"

    def test_to_dict(self):
        module = Module("B", "moduleB", {"A", "C"})
        assert module.to_dict() == {
            "id": "B",
            "directory": "moduleB",
            "dependencies": ["A", "C"],
        }

    def test_is_hashable(self):
        assert len({Module("A", "a"), Module("A", "a")}) == 1


class TestChangeSet:
    """Test ChangeSet and the ALL_CHANGED sentinel."""

    def test_of_normalises_and_keeps_order(self):
        changes = ChangeSet.of(["./b/x.txt", "a/y.txt", ""])
        assert list(changes) == ["b/x.txt", "a/y.txt"]
        assert len(changes) == 2

    def test_empty(self):
        assert ChangeSet().is_empty()
        assert not ALL_CHANGED.is_empty()

    def test_sentinel(self):
        assert ALL_CHANGED.is_all_changed
        assert list(ALL_CHANGED) == []

    def test_everything_equals_sentinel(self):
        assert ChangeSet.everything(reason="first build") == ALL_CHANGED

    def test_to_dict(self):
        data = ChangeSet.of(["a.txt"]).to_dict()
        assert data["paths"] == ["a.txt"]
        assert data["all_changed"] is False

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ChangeSet().all_changed = True
