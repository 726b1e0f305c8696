"""
bootstrap/config.py - Engine configuration

Provides configuration loading from files, environment variables, and defaults.
Layering: defaults -> environment -> config file -> explicit overrides.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, FrozenSet, List, Optional, Union
from pathlib import Path
import os
import logging

import yaml

from affected.core.enums import AffectedMode, CompareMode
from affected.core.registry import read_document
from affected.errors.taxonomy import ConfigValidationError

logger = logging.getLogger("bootstrap.config")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _split_ids(value: Optional[str]) -> FrozenSet[str]:
    """Comma separated module ids."""
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def _split_patterns(value: Optional[str]) -> List[str]:
    """Newline separated patterns (regexes may contain commas)."""
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("AFFECTED_LOG_LEVEL", "INFO"),
            format=os.getenv("AFFECTED_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("AFFECTED_LOG_FILE"),
            json_logs=_env_flag("AFFECTED_JSON_LOGS"),
        )


@dataclass
class AffectedConfig:
    """
    Configuration of one affected-set computation.

    target_task_name is required and must not start with ":".
    An empty allow_list means every module is eligible.
    mode accepts an AffectedMode or its name; it is checked when the
    engine validates the configuration.
    """

    target_task_name: Optional[str] = None
    always_run: FrozenSet[str] = field(default_factory=frozenset)
    never_run: FrozenSet[str] = field(default_factory=frozenset)
    allow_list: FrozenSet[str] = field(default_factory=frozenset)
    affects_all_patterns: List[str] = field(default_factory=list)
    ignored_patterns: List[str] = field(default_factory=list)
    mode: Union[AffectedMode, str] = AffectedMode.INCLUDE_DEPENDENTS
    debug: bool = False

    # Host integration
    enabled: bool = True
    commit: Optional[str] = None
    previous_commit: Optional[str] = None
    compare_mode: Union[CompareMode, str] = CompareMode.COMMIT
    run_all: bool = False
    command_line: bool = False
    command_line_args: List[str] = field(default_factory=list)

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        for name in ("always_run", "never_run", "allow_list"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = _split_ids(value)
            setattr(self, name, frozenset(value or ()))
        if isinstance(self.command_line_args, str):
            self.command_line_args = self.command_line_args.split()
        for name in ("affects_all_patterns", "ignored_patterns"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = _split_patterns(value)
            setattr(self, name, list(value or []))
        self.command_line_args = list(self.command_line_args or [])

    def resolved_compare_mode(self) -> CompareMode:
        if isinstance(self.compare_mode, CompareMode):
            return self.compare_mode
        try:
            return CompareMode(str(self.compare_mode).strip().upper())
        except ValueError:
            choices = ", ".join(m.value for m in CompareMode)
            raise ConfigValidationError(
                f"compare_mode must be one of {choices}, got {self.compare_mode!r}",
                option="compare_mode",
            )

    @classmethod
    def from_env(cls) -> "AffectedConfig":
        """Create configuration from AFFECTED_* environment variables."""
        args = os.getenv("AFFECTED_COMMAND_LINE_ARGS", "")
        return cls(
            target_task_name=os.getenv("AFFECTED_TARGET"),
            always_run=_split_ids(os.getenv("AFFECTED_ALWAYS_RUN")),
            never_run=_split_ids(os.getenv("AFFECTED_NEVER_RUN")),
            allow_list=_split_ids(os.getenv("AFFECTED_PROJECTS")),
            affects_all_patterns=_split_patterns(os.getenv("AFFECTED_AFFECTS_ALL")),
            ignored_patterns=_split_patterns(os.getenv("AFFECTED_IGNORED")),
            mode=os.getenv("AFFECTED_MODE", AffectedMode.INCLUDE_DEPENDENTS.value),
            debug=_env_flag("AFFECTED_DEBUG"),
            enabled=_env_flag("AFFECTED_RUN", "true"),
            commit=os.getenv("AFFECTED_COMMIT"),
            previous_commit=os.getenv("AFFECTED_PREV_COMMIT"),
            compare_mode=os.getenv("AFFECTED_COMPARE_MODE", CompareMode.COMMIT.value),
            run_all=_env_flag("AFFECTED_ALL"),
            command_line=_env_flag("AFFECTED_RUN_COMMAND_LINE"),
            command_line_args=args.split() if args else [],
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "AffectedConfig":
        """Load configuration from a JSON or YAML file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        try:
            data = read_document(path)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigValidationError(f"Cannot parse config file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {filepath} must contain a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "AffectedConfig":
        """Create config from dictionary, on top of the environment."""
        config = cls.from_env()
        config.apply(data)
        return config

    def apply(self, data: Dict[str, Any]) -> "AffectedConfig":
        """Override fields from a dictionary (snake_case or camelCase keys)."""
        names = {f.name for f in fields(self)}

        for key, value in data.items():
            if value is None:
                continue
            name = CONFIG_ALIASES.get(key, key)
            if name == "logging":
                if not isinstance(value, dict):
                    raise ConfigValidationError("logging must be a mapping", option="logging")
                for lk, lv in value.items():
                    if hasattr(self.logging, lk):
                        setattr(self.logging, lk, lv)
                continue
            if name not in names:
                logger.warning(f"Unknown configuration option ignored: {key}")
                continue
            setattr(self, name, value)

        self.__post_init__()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        mode = self.mode.value if isinstance(self.mode, AffectedMode) else self.mode
        compare = self.compare_mode.value if isinstance(self.compare_mode, CompareMode) else self.compare_mode
        return {
            "target_task_name": self.target_task_name,
            "always_run": sorted(self.always_run),
            "never_run": sorted(self.never_run),
            "allow_list": sorted(self.allow_list),
            "affects_all_patterns": list(self.affects_all_patterns),
            "ignored_patterns": list(self.ignored_patterns),
            "mode": mode,
            "debug": self.debug,
            "enabled": self.enabled,
            "commit": self.commit,
            "previous_commit": self.previous_commit,
            "compare_mode": compare,
            "run_all": self.run_all,
            "command_line": self.command_line,
            "command_line_args": list(self.command_line_args),
        }


# Option names as the build plugin exposed them
CONFIG_ALIASES: Dict[str, str] = {
    "target": "target_task_name",
    "targetTaskName": "target_task_name",
    "alwaysRun": "always_run",
    "alwaysRunProjects": "always_run",
    "neverRun": "never_run",
    "neverRunProjects": "never_run",
    "projects": "allow_list",
    "allowList": "allow_list",
    "affectsAllRegex": "affects_all_patterns",
    "affectsAllPatterns": "affects_all_patterns",
    "ignoredRegex": "ignored_patterns",
    "ignoredPatterns": "ignored_patterns",
    "debugLogging": "debug",
    "prevCommit": "previous_commit",
    "compareMode": "compare_mode",
    "all": "run_all",
    "runCommandLine": "command_line",
    "commandLineArgs": "command_line_args",
}


DEFAULT_CONFIG_PATHS = (
    "./affected.json",
    "./affected.yaml",
    "./affected.yml",
    "./config/affected.json",
)


def load_config(
    filepath: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AffectedConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to a JSON/YAML config file
        overrides: Values applied last (command-line options)

    Returns:
        AffectedConfig instance
    """
    config: Optional[AffectedConfig] = None

    if filepath:
        config = AffectedConfig.from_file(filepath)
    else:
        for path in DEFAULT_CONFIG_PATHS:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                config = AffectedConfig.from_file(path)
                break

    if config is None:
        config = AffectedConfig.from_env()

    if overrides:
        config.apply(overrides)

    logger.debug(f"Configuration loaded: target={config.target_task_name}, mode={config.mode}")
    return config
