"""
Unit tests for engine/engine.py

Covers the finalisation precedence:
    never_run > allow_list > (global | direct | dependent | always_run)
"""

import logging

import pytest

from affected.bootstrap.config import AffectedConfig
from affected.core.enums import AffectedMode, EngineState
from affected.core.models import ALL_CHANGED, ChangeSet, Module
from affected.core.registry import ModuleRegistry
from affected.engine.decisions import DecisionReason
from affected.engine.engine import AffectedSetEngine, compute
from affected.errors.taxonomy import ConfigValidationError, NoticeKind


def make_config(**kwargs):
    kwargs.setdefault("target_task_name", "test")
    return AffectedConfig(**kwargs)


@pytest.fixture
def engine(two_module_registry):
    return AffectedSetEngine(two_module_registry)


@pytest.fixture
def project_engine(project_registry):
    return AffectedSetEngine(project_registry)


# =============================================================================
# WORKED EXAMPLES
# =============================================================================

class TestTwoModuleBuild:
    """A(moduleA) <- B(moduleB)."""

    def test_change_in_dependency_runs_dependent(self, engine):
        decisions = engine.compute(ChangeSet.of(["moduleA/File.x"]), make_config())
        assert decisions.is_affected("A")
        assert decisions.is_affected("B")
        assert decisions.reason_for("A") == DecisionReason.DIRECT
        assert decisions.reason_for("B") == DecisionReason.DEPENDENT

    def test_change_in_dependent_only(self, engine):
        decisions = engine.compute(ChangeSet.of(["moduleB/File.x"]), make_config())
        assert not decisions.is_affected("A")
        assert decisions.is_affected("B")

    def test_affects_all_match(self, engine):
        config = make_config(affects_all_patterns=[r"^build\.gradle$"])
        decisions = engine.compute(ChangeSet.of(["build.gradle"]), config)
        assert decisions.affected_modules() == ["A", "B"]
        assert decisions.global_affected
        assert decisions.global_files == ("build.gradle",)

    def test_only_direct_mode(self, engine):
        config = make_config(mode=AffectedMode.ONLY_DIRECT)
        decisions = engine.compute(ChangeSet.of(["moduleA/File.x"]), config)
        assert decisions.affected_modules() == ["A"]
        assert decisions.dependent_affected == frozenset()

    def test_never_run_wins_over_direct(self, engine):
        config = make_config(never_run={"A"})
        decisions = engine.compute(ChangeSet.of(["moduleA/File.x"]), config)
        assert not decisions.is_affected("A")
        assert decisions.is_affected("B")
        assert decisions.reason_for("A") == DecisionReason.NEVER_RUN


# =============================================================================
# PRECEDENCE
# =============================================================================

class TestPrecedence:
    """Override interaction."""

    def test_never_run_wins_over_global(self, engine):
        decisions = engine.compute(ALL_CHANGED, make_config(never_run={"B"}))
        assert decisions.affected_modules() == ["A"]

    def test_never_run_wins_over_always_run(self, engine):
        decisions = engine.compute(ChangeSet(), make_config(always_run={"A"}, never_run={"A"}))
        assert not decisions.is_affected("A")

    def test_allow_list_restricts_global(self, engine):
        decisions = engine.compute(ALL_CHANGED, make_config(allow_list={"B"}))
        assert decisions.affected_modules() == ["B"]
        assert decisions.reason_for("A") == DecisionReason.NOT_ALLOWED

    def test_allow_list_restricts_always_run(self, engine):
        decisions = engine.compute(ChangeSet(), make_config(always_run={"A"}, allow_list={"B"}))
        assert decisions.affected_modules() == []

    def test_allow_list_does_not_force(self, engine):
        decisions = engine.compute(ChangeSet(), make_config(allow_list={"A", "B"}))
        assert decisions.affected_modules() == []

    def test_always_run_with_empty_changes(self, engine):
        decisions = engine.compute(ChangeSet(), make_config(always_run={"A"}))
        assert decisions.affected_modules() == ["A"]
        assert decisions.reason_for("A") == DecisionReason.ALWAYS_RUN
        assert decisions.reason_for("B") == DecisionReason.UNAFFECTED

    def test_always_run_does_not_seed_dependents(self, engine):
        decisions = engine.compute(ChangeSet(), make_config(always_run={"A"}))
        assert not decisions.is_affected("B")

    def test_never_run_module_still_seeds_dependents(self, engine):
        decisions = engine.compute(ChangeSet.of(["moduleA/x"]), make_config(never_run={"A"}))
        assert decisions.dependent_affected == frozenset({"B"})


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestClassification:
    """Global and ignored changes."""

    def test_all_changed_runs_everything(self, project_engine, project_registry):
        decisions = project_engine.compute(ALL_CHANGED, make_config())
        assert decisions.affected_modules() == project_registry.ids()

    def test_global_dominates_ignore(self, engine):
        config = make_config(affects_all_patterns=[r"\.gradle$"], ignored_patterns=[r".*"])
        decisions = engine.compute(ChangeSet.of(["settings.gradle"]), config)
        assert decisions.global_affected
        assert decisions.affected_modules() == ["A", "B"]

    def test_ignored_files_do_not_affect(self, engine):
        config = make_config(ignored_patterns=[r"\.md$"])
        decisions = engine.compute(ChangeSet.of(["moduleA/README.md"]), config)
        assert decisions.affected_modules() == []
        assert decisions.ignored_files == ("moduleA/README.md",)

    def test_ignored_changes_match_removed_changes(self, engine):
        config = make_config(ignored_patterns=[r"\.md$"])
        with_ignored = engine.compute(
            ChangeSet.of(["moduleB/File.x", "moduleA/README.md"]), config
        )
        without = engine.compute(ChangeSet.of(["moduleB/File.x"]), config)
        assert with_ignored.affected == without.affected

    def test_empty_change_set(self, engine):
        decisions = engine.compute(ChangeSet(), make_config())
        assert decisions.affected_modules() == []
        assert decisions.skipped_modules() == ["A", "B"]

    def test_none_change_set_treated_as_empty(self, engine):
        assert engine.compute(None, make_config()).affected_modules() == []


# =============================================================================
# DEPENDENT EXPANSION
# =============================================================================

class TestDependentExpansion:
    """Transitive dependents in INCLUDE_DEPENDENTS mode."""

    def test_transitive(self, project_engine):
        decisions = project_engine.compute(ChangeSet.of(["libs/core/Core.java"]), make_config())
        assert decisions.direct_affected == frozenset({":core"})
        assert decisions.dependent_affected == frozenset({":util", ":api", ":app"})
        assert decisions.affected_modules() == [":api", ":app", ":core", ":util"]

    def test_only_direct_is_subset(self, project_engine):
        changes = ChangeSet.of(["libs/core/Core.java", "services/api/Api.java"])
        direct = project_engine.compute(changes, make_config(mode="ONLY_DIRECT"))
        dependents = project_engine.compute(changes, make_config())
        assert direct.affected <= dependents.affected
        assert direct.affected == frozenset({":core", ":api"})

    def test_cycle_terminates(self):
        registry = ModuleRegistry([
            Module("A", "a", {"B"}),
            Module("B", "b", {"A"}),
            Module("C", "c", {"B"}),
        ])
        decisions = compute(ChangeSet.of(["a/x"]), registry, make_config())
        assert decisions.affected_modules() == ["A", "B", "C"]
        assert any(n.kind == NoticeKind.DEPENDENCY_CYCLE for n in decisions.notices)

    def test_unknown_dependency_edge_ignored(self):
        registry = ModuleRegistry([Module("A", "a", {"ghost"}), Module("B", "b", {"A"})])
        decisions = compute(ChangeSet.of(["a/x"]), registry, make_config())
        assert decisions.affected_modules() == ["A", "B"]
        assert [n.kind for n in decisions.notices] == [NoticeKind.UNKNOWN_DEPENDENCY]


# =============================================================================
# OWNERSHIP EDGE CASES
# =============================================================================

class TestOwnership:
    """Unowned files and ties."""

    def test_unowned_file_affects_nothing(self, engine):
        decisions = engine.compute(ChangeSet.of(["README.md"]), make_config())
        assert decisions.affected_modules() == []
        assert decisions.unowned_files == ("README.md",)
        assert [n.kind for n in decisions.notices] == [NoticeKind.UNOWNED_FILE]

    def test_root_module_owns_leftovers(self, project_engine):
        decisions = project_engine.compute(ChangeSet.of(["gradle.properties"]), make_config())
        assert decisions.affected_modules() == [":"]
        assert decisions.unowned_files == ()

    def test_tie_uses_smallest_id(self):
        registry = ModuleRegistry([Module("b", "shared"), Module("a", "shared")])
        decisions = compute(ChangeSet.of(["shared/x"]), registry, make_config())
        assert decisions.affected_modules() == ["a"]
        kinds = {n.kind for n in decisions.notices}
        assert NoticeKind.TIED_OWNERSHIP in kinds
        assert NoticeKind.DUPLICATE_DIRECTORY in kinds


# =============================================================================
# OVERRIDES AND VALIDATION
# =============================================================================

class TestOverrides:
    """Unknown module ids in overrides."""

    def test_unknown_override_ignored_with_warning(self, engine, caplog):
        config = make_config(always_run={"A", "ghost"})
        with caplog.at_level(logging.WARNING):
            decisions = engine.compute(ChangeSet(), config)
        assert decisions.affected_modules() == ["A"]
        assert decisions.always_run == frozenset({"A"})
        unknown = [n for n in decisions.notices if n.kind == NoticeKind.UNKNOWN_OVERRIDE]
        assert [n.subject for n in unknown] == ["ghost"]
        assert "ghost" in caplog.text

    def test_allow_list_of_unknown_ids_is_unrestricted(self, engine):
        decisions = engine.compute(ALL_CHANGED, make_config(allow_list={"ghost"}))
        assert decisions.allow_set == frozenset()
        assert decisions.affected_modules() == ["A", "B"]


class TestValidationFailures:
    """Configuration errors abort before any decision."""

    def test_missing_target(self, engine):
        with pytest.raises(ConfigValidationError, match="required"):
            engine.compute(ChangeSet(), AffectedConfig())

    def test_target_with_separator(self, engine):
        with pytest.raises(ConfigValidationError):
            engine.compute(ChangeSet(), make_config(target_task_name=":test"))

    def test_bad_mode(self, engine):
        with pytest.raises(ConfigValidationError):
            engine.compute(ChangeSet(), make_config(mode="EVERYTHING"))

    def test_bad_regex(self, engine):
        with pytest.raises(ConfigValidationError):
            engine.compute(ChangeSet(), make_config(ignored_patterns=["("]))


# =============================================================================
# ENGINE PROPERTIES
# =============================================================================

class TestEngineProperties:
    """Determinism, trace and logging."""

    def test_idempotent(self, project_engine):
        changes = ChangeSet.of(["libs/util/U.java", "docs/a.md"])
        config = make_config(always_run={":docs"})
        assert project_engine.compute(changes, config) == project_engine.compute(changes, config)

    def test_input_order_irrelevant(self, project_engine):
        a = project_engine.compute(ChangeSet.of(["libs/util/U.java", "services/api/A.java"]), make_config())
        b = project_engine.compute(ChangeSet.of(["services/api/A.java", "libs/util/U.java"]), make_config())
        assert a.affected == b.affected

    def test_trace_for_global_shortcut(self, engine):
        decisions = engine.compute(ALL_CHANGED, make_config())
        assert decisions.trace == (
            EngineState.INIT,
            EngineState.VALIDATED,
            EngineState.CLASSIFIED,
            EngineState.GLOBAL_SHORTCUT,
            EngineState.FINALIZED,
        )

    def test_trace_for_graph_expansion(self, engine):
        decisions = engine.compute(ChangeSet.of(["moduleA/x"]), make_config())
        assert EngineState.GRAPH_EXPANDED in decisions.trace
        assert EngineState.GLOBAL_SHORTCUT not in decisions.trace
        assert decisions.final_state == EngineState.FINALIZED

    def test_summary_logged(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="affected.engine.engine"):
            engine.compute(ChangeSet.of(["moduleB/x"]), make_config())
        assert "1 of 2 modules affected for task test" in caplog.text

    def test_debug_logs_decisions(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="affected.engine.engine"):
            engine.compute(ChangeSet.of(["moduleA/x"]), make_config(debug=True))
        assert "Directly affected modules: ['A']" in caplog.text
        assert "B: runs (dependent)" in caplog.text

    def test_register_modules(self):
        engine = AffectedSetEngine.register_modules([
            {"id": "A", "directory": "moduleA"},
            {"id": "B", "directory": "moduleB", "dependencies": ["A"]},
        ])
        assert engine.compute(ChangeSet.of(["moduleA/x"]), make_config()).affected_modules() == ["A", "B"]
