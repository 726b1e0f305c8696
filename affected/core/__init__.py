"""
Core Module

Data model shared by every component: enumerations, modules, change
sets and the module registry.
"""

from affected.core.enums import (
    AffectedMode,
    ChangeClass,
    CompareMode,
    EngineState,
    MODULE_PATH_SEPARATOR,
)
from affected.core.models import (
    Module,
    ChangeSet,
    ALL_CHANGED,
    normalize_path,
    path_segments,
)
from affected.core.registry import ModuleRegistry

__all__ = [
    "AffectedMode",
    "ChangeClass",
    "CompareMode",
    "EngineState",
    "MODULE_PATH_SEPARATOR",
    "Module",
    "ChangeSet",
    "ALL_CHANGED",
    "normalize_path",
    "path_segments",
    "ModuleRegistry",
]
