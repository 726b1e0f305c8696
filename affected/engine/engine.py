"""
Affected-Set Engine

Turns a ChangeSet into per-module run decisions:

    validate -> resolve overrides -> classify changes ->
    (global shortcut | map direct owners -> expand dependents) -> finalize

Finalisation precedence, per module:
    1. never_run excludes, whatever else applies
    2. a non-empty allow list excludes every module outside it
    3. otherwise the module runs if globally affected, directly affected,
       dependent-affected, or listed in always_run

Each compute() call works on local state only; the engine keeps nothing
but the registry between calls.
"""

from __future__ import annotations
from typing import FrozenSet, Iterable, List, Optional, Set, Union
import logging

from affected.bootstrap.config import AffectedConfig
from affected.core.enums import AffectedMode, EngineState
from affected.core.models import ChangeSet, Module
from affected.core.registry import ModuleRegistry
from affected.dependencies.graph import DependencyGraph
from affected.dependencies.ownership import OwnershipMapper
from affected.errors.aggregator import NoticeCollector
from affected.errors.taxonomy import unknown_override, unowned_file
from .decisions import DecisionSet
from .validation import validate_config

logger = logging.getLogger(__name__)


class AffectedSetEngine:
    """
    Computes which modules must run their target task.

    Usage:
        engine = AffectedSetEngine.register_modules(modules)
        decisions = engine.compute(change_set, config)
        if decisions.is_affected("app"): ...
    """

    def __init__(self, registry: ModuleRegistry):
        self._registry = registry

    @classmethod
    def register_modules(cls, modules: Iterable[Union[Module, dict]]) -> "AffectedSetEngine":
        return cls(ModuleRegistry.register_modules(modules))

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    def dependency_graph(self, notices: Optional[NoticeCollector] = None) -> DependencyGraph:
        """Build the dependency graph for this engine's registry."""
        return DependencyGraph.from_registry(self._registry, notices)

    # -------------------------------------------------------------------------
    # Computation
    # -------------------------------------------------------------------------

    def compute(self, change_set: Optional[ChangeSet], config: AffectedConfig) -> DecisionSet:
        """
        Compute the decision set for one build invocation.

        Raises:
            ConfigValidationError: before any decision is made
        """
        trace: List[EngineState] = [EngineState.INIT]
        notices = NoticeCollector(logger)

        # Phase 1: validate
        validated = validate_config(config)
        trace.append(EngineState.VALIDATED)
        debug = validated.debug

        if change_set is None:
            change_set = ChangeSet()

        if debug:
            logger.info(f"Target task: {validated.target_task_name}")
            logger.info(f"Mode: {validated.mode.value}")
            logger.info(f"Affects all patterns: {validated.classifier.affects_all_patterns}")
            logger.info(f"Ignored patterns: {validated.classifier.ignored_patterns}")
            if change_set.is_all_changed:
                logger.info(f"Changed files: ALL ({change_set.reason})")
            else:
                logger.info(f"Changed files: {list(change_set)}")

        notices.extend(self._registry.validate())

        # Phase 2: overrides restricted to known modules
        always_run = self._resolve_override("always_run", validated.always_run, notices)
        never_run = self._resolve_override("never_run", validated.never_run, notices)
        allow_set = self._resolve_override("allow_list", validated.allow_list, notices)

        if validated.allow_list and not allow_set:
            logger.warning("allow_list names no known module; eligibility is unrestricted")

        # Phase 3: classify
        classification = validated.classifier.classify_all(change_set)
        trace.append(EngineState.CLASSIFIED)

        direct: Set[str] = set()
        dependent: Set[str] = set()
        unowned: List[str] = []
        global_affected = classification.is_global

        if global_affected:
            trace.append(EngineState.GLOBAL_SHORTCUT)
            if debug:
                if classification.all_changed:
                    logger.info("All modules are affected")
                else:
                    logger.info(f"All modules are affected by: {list(classification.global_files)}")
        else:
            # Phase 4: owners of candidate files
            mapper = OwnershipMapper(self._registry, notices)
            for path in classification.candidate_files:
                owner = mapper.owner_of(path)
                if owner is None:
                    unowned.append(path)
                    notices.add(unowned_file(path))
                else:
                    direct.add(owner)

            if debug:
                logger.info(f"Ignored files: {list(classification.ignored_files)}")
                logger.info(f"Directly affected modules: {sorted(direct)}")

            # Phase 5: dependents
            if validated.mode == AffectedMode.INCLUDE_DEPENDENTS and direct:
                graph = self.dependency_graph(notices)
                dependent = graph.dependents_of(direct)
                if debug:
                    logger.info(f"Dependent affected modules: {sorted(dependent)}")
            trace.append(EngineState.GRAPH_EXPANDED)

        # Phase 6: finalize
        affected = frozenset(
            m for m in self._registry.ids()
            if self._should_run(m, global_affected, direct, dependent, always_run, never_run, allow_set)
        )
        trace.append(EngineState.FINALIZED)

        decisions = DecisionSet(
            modules=tuple(self._registry.ids()),
            affected=affected,
            target_task_name=validated.target_task_name,
            mode=validated.mode,
            global_affected=global_affected,
            direct_affected=frozenset(direct),
            dependent_affected=frozenset(dependent),
            always_run=always_run,
            never_run=never_run,
            allow_set=allow_set,
            global_files=classification.global_files,
            ignored_files=classification.ignored_files,
            unowned_files=tuple(unowned),
            notices=notices.freeze(),
            trace=tuple(trace),
        )

        if debug:
            logger.info(f"Decision inputs: {decisions.debug_snapshot()}")
            for module_id in decisions.modules:
                logger.info(
                    f"{module_id}: {'runs' if decisions.is_affected(module_id) else 'skipped'} "
                    f"({decisions.reason_for(module_id).value})"
                )
            if unowned:
                logger.info(f"Files outside every module: {unowned}")

        logger.info(
            f"{len(affected)} of {len(decisions.modules)} modules affected "
            f"for task {validated.target_task_name}"
        )
        return decisions

    @staticmethod
    def _should_run(
        module_id: str,
        global_affected: bool,
        direct: Set[str],
        dependent: Set[str],
        always_run: FrozenSet[str],
        never_run: FrozenSet[str],
        allow_set: FrozenSet[str],
    ) -> bool:
        if module_id in never_run:
            return False
        if allow_set and module_id not in allow_set:
            return False
        return (
            global_affected
            or module_id in direct
            or module_id in dependent
            or module_id in always_run
        )

    def _resolve_override(
        self,
        option: str,
        ids: FrozenSet[str],
        notices: NoticeCollector,
    ) -> FrozenSet[str]:
        """Intersect configured ids with the registry, reporting unknown ones."""
        known = frozenset(i for i in ids if i in self._registry)
        for unknown in sorted(ids - known):
            notices.add(unknown_override(option, unknown))
        return known


def compute(
    change_set: Optional[ChangeSet],
    registry: ModuleRegistry,
    config: AffectedConfig,
) -> DecisionSet:
    """Compute decisions without keeping an engine around."""
    return AffectedSetEngine(registry).compute(change_set, config)
