"""
Affected-Set Engine

Provides:
- AffectedSetEngine: change set + config -> DecisionSet
- DecisionSet: immutable, queryable per-module decisions
- validate_config: fail-fast configuration checks
"""

from .decisions import DecisionSet, DecisionReason
from .validation import ValidatedConfig, validate_config, parse_mode
from .engine import AffectedSetEngine, compute

__all__ = [
    "AffectedSetEngine",
    "compute",
    "DecisionSet",
    "DecisionReason",
    "ValidatedConfig",
    "validate_config",
    "parse_mode",
]
