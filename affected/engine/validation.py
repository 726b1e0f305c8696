"""
Configuration validation

First phase of every computation. Fails fast with ConfigValidationError
so nothing downstream runs on a configuration that cannot be honoured.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

from affected.bootstrap.config import AffectedConfig
from affected.changes.patterns import PatternClassifier
from affected.core.enums import AffectedMode, MODULE_PATH_SEPARATOR
from affected.errors.taxonomy import ConfigValidationError

# Older spelling still found in build scripts
MODE_ALIASES = {
    "ONLY_DIRECTLY": AffectedMode.ONLY_DIRECT,
}


@dataclass(frozen=True)
class ValidatedConfig:
    """Configuration after validation, with patterns compiled."""

    target_task_name: str
    mode: AffectedMode
    classifier: PatternClassifier
    always_run: FrozenSet[str]
    never_run: FrozenSet[str]
    allow_list: FrozenSet[str]
    debug: bool


def parse_mode(value: Any) -> AffectedMode:
    """Resolve a mode given as enum or name."""
    if isinstance(value, AffectedMode):
        return value
    if value is None:
        return AffectedMode.INCLUDE_DEPENDENTS

    name = str(value).strip().upper()
    if name in MODE_ALIASES:
        return MODE_ALIASES[name]
    try:
        return AffectedMode(name)
    except ValueError:
        raise ConfigValidationError(
            f"mode must be either {AffectedMode.ONLY_DIRECT.value} or "
            f"{AffectedMode.INCLUDE_DEPENDENTS.value}, got {value!r}",
            option="mode",
        )


def validate_target_task(name: Optional[str]) -> str:
    if name is None or not str(name).strip():
        raise ConfigValidationError("target_task_name is required", option="target_task_name")
    name = str(name).strip()
    if name.startswith(MODULE_PATH_SEPARATOR):
        raise ConfigValidationError(
            f"target_task_name should not start with '{MODULE_PATH_SEPARATOR}': {name}",
            option="target_task_name",
        )
    return name


def validate_config(config: AffectedConfig) -> ValidatedConfig:
    """
    Validate a configuration.

    Raises:
        ConfigValidationError: missing or malformed target task name,
            unknown mode, or an invalid regular expression.
    """
    if config is None:
        raise ConfigValidationError("configuration is required")

    return ValidatedConfig(
        target_task_name=validate_target_task(config.target_task_name),
        mode=parse_mode(config.mode),
        classifier=PatternClassifier(config.affects_all_patterns, config.ignored_patterns),
        always_run=frozenset(config.always_run),
        never_run=frozenset(config.never_run),
        allow_list=frozenset(config.allow_list),
        debug=bool(config.debug),
    )
