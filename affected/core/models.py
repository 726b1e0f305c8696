"""
Data model: modules and change sets.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import PurePosixPath
import os
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from .enums import MODULE_PATH_SEPARATOR

# A backslash separates paths only on Windows hosts; on POSIX it is a filename character
BACKSLASH_IS_SEPARATOR = os.sep == "\\"


def normalize_path(path: str) -> str:
    """
    Normalise a file or directory path to root-relative POSIX form.

    Backslashes become slashes on Windows hosts, "./" prefixes and
    trailing slashes are dropped, and the root itself ("", ".", "./") becomes "".
    """
    if path is None:
        return ""
    text = str(path).strip()
    if BACKSLASH_IS_SEPARATOR:
        text = text.replace("\\", "/")
    if text in ("", ".", "./"):
        return ""
    normalized = str(PurePosixPath(text))
    return "" if normalized == "." else normalized


def path_segments(path: str) -> Tuple[str, ...]:
    """Split a normalised path into its segments."""
    normalized = normalize_path(path)
    if not normalized:
        return ()
    return tuple(part for part in normalized.split("/") if part)


# =============================================================================
# MODULE
# =============================================================================

@dataclass(frozen=True)
class Module:
    """A unit of the build with its own directory and dependency edges."""

    id: str
    directory: str = ""
    dependencies: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "directory", normalize_path(self.directory))
        object.__setattr__(self, "dependencies", frozenset(self.dependencies or ()))

    @property
    def is_root(self) -> bool:
        """The root module owns the whole tree."""
        return self.directory == ""

    @property
    def segments(self) -> Tuple[str, ...]:
        return path_segments(self.directory)

    def owns(self, file_path: str) -> bool:
        """True if the module directory is a path-segment prefix of the file."""
        own = self.segments
        return path_segments(file_path)[:len(own)] == own

    def task_path(self, task_name: str) -> str:
        """Fully qualified path of this module's task."""
        if self.is_root:
            return f"{MODULE_PATH_SEPARATOR}{task_name}"
        return f"{self.id}{MODULE_PATH_SEPARATOR}{task_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "directory": self.directory,
            "dependencies": sorted(self.dependencies),
        }


# =============================================================================
# CHANGE SET
# =============================================================================

@dataclass(frozen=True)
class ChangeSet:
    """
    Ordered file paths changed since a reference point.

    The ALL_CHANGED sentinel carries no paths and means every module is
    treated as changed (first build, no comparable prior state, forced).
    """

    paths: Tuple[str, ...] = ()
    all_changed: bool = False
    reason: Optional[str] = field(default=None, compare=False)

    @classmethod
    def of(cls, paths: Iterable[str]) -> "ChangeSet":
        normalized = []
        for p in paths:
            n = normalize_path(p)
            if n:
                normalized.append(n)
        return cls(paths=tuple(normalized))

    @classmethod
    def everything(cls, reason: str = "forced") -> "ChangeSet":
        return cls(paths=(), all_changed=True, reason=reason)

    @property
    def is_all_changed(self) -> bool:
        return self.all_changed

    def is_empty(self) -> bool:
        return not self.all_changed and not self.paths

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "all_changed": self.all_changed,
            "reason": self.reason,
            "paths": list(self.paths),
        }


ALL_CHANGED = ChangeSet(all_changed=True, reason="sentinel")
