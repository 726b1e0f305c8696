"""
Decision Set

Immutable result of one computation. Queried once per module by the
host to gate that module's target task; safe for concurrent readers
since nothing mutates it after construction.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Tuple

from affected.core.enums import AffectedMode, EngineState
from affected.errors.taxonomy import Notice


class DecisionReason(Enum):
    """Why a module runs or is skipped. First matching reason is reported."""
    NEVER_RUN = "never_run"
    NOT_ALLOWED = "not_allowed"
    GLOBAL = "global"
    DIRECT = "direct"
    DEPENDENT = "dependent"
    ALWAYS_RUN = "always_run"
    UNAFFECTED = "unaffected"
    UNKNOWN_MODULE = "unknown_module"


@dataclass(frozen=True)
class DecisionSet:
    """Per-module run decisions plus the intermediate sets that produced them."""

    modules: Tuple[str, ...]
    affected: FrozenSet[str]
    target_task_name: str
    mode: AffectedMode

    global_affected: bool = False
    direct_affected: FrozenSet[str] = frozenset()
    dependent_affected: FrozenSet[str] = frozenset()
    always_run: FrozenSet[str] = frozenset()
    never_run: FrozenSet[str] = frozenset()
    allow_set: FrozenSet[str] = frozenset()

    global_files: Tuple[str, ...] = ()
    ignored_files: Tuple[str, ...] = ()
    unowned_files: Tuple[str, ...] = ()
    notices: Tuple[Notice, ...] = field(default=(), compare=False)
    trace: Tuple[EngineState, ...] = field(default=(), compare=False)

    def is_affected(self, module_id: str) -> bool:
        """Should the module's target task run? Unknown modules never run."""
        return module_id in self.affected

    def affected_modules(self) -> List[str]:
        return sorted(self.affected)

    def skipped_modules(self) -> List[str]:
        return [m for m in self.modules if m not in self.affected]

    def reason_for(self, module_id: str) -> DecisionReason:
        """Explain a decision following the finalisation precedence."""
        if module_id not in self.modules:
            return DecisionReason.UNKNOWN_MODULE
        if module_id in self.never_run:
            return DecisionReason.NEVER_RUN
        if self.allow_set and module_id not in self.allow_set:
            return DecisionReason.NOT_ALLOWED
        if self.global_affected:
            return DecisionReason.GLOBAL
        if module_id in self.direct_affected:
            return DecisionReason.DIRECT
        if module_id in self.dependent_affected:
            return DecisionReason.DEPENDENT
        if module_id in self.always_run:
            return DecisionReason.ALWAYS_RUN
        return DecisionReason.UNAFFECTED

    @property
    def final_state(self) -> EngineState:
        return self.trace[-1] if self.trace else EngineState.INIT

    def debug_snapshot(self) -> Dict[str, Any]:
        """The intermediate sets, for diagnostic logging."""
        return {
            "direct_affected": sorted(self.direct_affected),
            "dependent_affected": sorted(self.dependent_affected),
            "global_affected": self.global_affected,
            "always_run": sorted(self.always_run),
            "never_run": sorted(self.never_run),
            "allow_set": sorted(self.allow_set),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_task_name": self.target_task_name,
            "mode": self.mode.value,
            "affected": self.affected_modules(),
            "skipped": self.skipped_modules(),
            "reasons": {m: self.reason_for(m).value for m in self.modules},
            **self.debug_snapshot(),
            "global_files": list(self.global_files),
            "ignored_files": list(self.ignored_files),
            "unowned_files": list(self.unowned_files),
            "notices": [n.to_dict() for n in self.notices],
        }
