"""
errors/taxonomy.py - Error classification for affected-set computation

Fatal conditions are exceptions and abort a computation before any
decision exists. Non-fatal conditions are Notice records: they never
interrupt computation and are surfaced through logging.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum


# =============================================================================
# FATAL ERRORS
# =============================================================================

class AffectedError(Exception):
    """Base exception for all affected-set errors."""
    pass


class ConfigValidationError(AffectedError):
    """Raised when the configuration cannot drive a computation."""

    def __init__(self, message: str, option: Optional[str] = None):
        self.option = option
        super().__init__(message)


class ChangeResolutionError(AffectedError):
    """Raised when the change source cannot produce a ChangeSet."""

    def __init__(self, message: str, command: Optional[str] = None, stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class RegistryIntegrityError(AffectedError):
    """Raised when the module registry itself is malformed."""
    pass


class TaskExecutionError(AffectedError):
    """Raised when the task runner gets a non-zero exit code."""

    def __init__(self, module_id: str, command: str, exit_code: int):
        self.module_id = module_id
        self.command = command
        self.exit_code = exit_code
        super().__init__(
            f"Executing '{command}' for module {module_id} failed with exit code {exit_code}"
        )


# =============================================================================
# NON-FATAL NOTICES
# =============================================================================

class NoticeSeverity(Enum):
    """Severity of a non-fatal notice."""
    INFO = "info"
    WARNING = "warning"


class NoticeKind(Enum):
    """What kind of non-fatal condition was observed."""
    TIED_OWNERSHIP = "tied_ownership"            # Two modules claim the same prefix
    DUPLICATE_DIRECTORY = "duplicate_directory"  # Two modules share a directory
    UNKNOWN_DEPENDENCY = "unknown_dependency"    # Edge to a module that does not exist
    DEPENDENCY_CYCLE = "dependency_cycle"        # Registry is not a DAG
    UNKNOWN_OVERRIDE = "unknown_override"        # Override id names no module
    UNOWNED_FILE = "unowned_file"                # Changed file outside every module


NOTICE_SEVERITY: Dict[NoticeKind, NoticeSeverity] = {
    NoticeKind.TIED_OWNERSHIP: NoticeSeverity.WARNING,
    NoticeKind.DUPLICATE_DIRECTORY: NoticeSeverity.WARNING,
    NoticeKind.UNKNOWN_DEPENDENCY: NoticeSeverity.WARNING,
    NoticeKind.DEPENDENCY_CYCLE: NoticeSeverity.WARNING,
    NoticeKind.UNKNOWN_OVERRIDE: NoticeSeverity.WARNING,
    NoticeKind.UNOWNED_FILE: NoticeSeverity.INFO,
}


@dataclass(frozen=True)
class Notice:
    """A non-fatal condition recorded during a computation."""

    kind: NoticeKind
    message: str
    subject: str = ""
    context: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def severity(self) -> NoticeSeverity:
        return NOTICE_SEVERITY[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "subject": self.subject,
            "message": self.message,
            "context": dict(self.context),
        }


def tied_ownership(path: str, winner: str, candidates) -> Notice:
    ordered = sorted(candidates)
    return Notice(
        kind=NoticeKind.TIED_OWNERSHIP,
        subject=path,
        message=f"{path} is claimed by {', '.join(ordered)} at the same depth; using {winner}",
        context={"winner": winner, "candidates": ordered},
    )


def unknown_dependency(module_id: str, dependency: str) -> Notice:
    return Notice(
        kind=NoticeKind.UNKNOWN_DEPENDENCY,
        subject=module_id,
        message=f"Module {module_id} depends on unknown module {dependency}; edge ignored",
        context={"dependency": dependency},
    )


def unknown_override(option: str, module_id: str) -> Notice:
    return Notice(
        kind=NoticeKind.UNKNOWN_OVERRIDE,
        subject=module_id,
        message=f"{option} references unknown module {module_id}; ignored",
        context={"option": option},
    )


def unowned_file(path: str) -> Notice:
    return Notice(
        kind=NoticeKind.UNOWNED_FILE,
        subject=path,
        message=f"{path} does not belong to any module",
    )
