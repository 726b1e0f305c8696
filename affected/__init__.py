"""
affected - Affected-module selection for multi-module builds

Given the files changed since a reference point and the module dependency
graph, decides which modules must run their build/test task.
"""

from affected.core import (
    AffectedMode,
    ChangeClass,
    CompareMode,
    EngineState,
    Module,
    ChangeSet,
    ALL_CHANGED,
    ModuleRegistry,
)
from affected.bootstrap.config import AffectedConfig, load_config
from affected.changes import PatternClassifier, GitChangeSource, StaticChangeSource
from affected.dependencies import DependencyGraph, OwnershipMapper
from affected.engine import AffectedSetEngine, DecisionSet, compute, validate_config
from affected.errors import (
    AffectedError,
    ConfigValidationError,
    ChangeResolutionError,
    RegistryIntegrityError,
    TaskExecutionError,
)

__version__ = "1.0.0"

__all__ = [
    "AffectedMode",
    "ChangeClass",
    "CompareMode",
    "EngineState",
    "Module",
    "ChangeSet",
    "ALL_CHANGED",
    "ModuleRegistry",
    "AffectedConfig",
    "load_config",
    "PatternClassifier",
    "GitChangeSource",
    "StaticChangeSource",
    "DependencyGraph",
    "OwnershipMapper",
    "AffectedSetEngine",
    "DecisionSet",
    "compute",
    "validate_config",
    "AffectedError",
    "ConfigValidationError",
    "ChangeResolutionError",
    "RegistryIntegrityError",
    "TaskExecutionError",
]
