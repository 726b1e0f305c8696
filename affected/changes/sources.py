"""
Change sources

Produce the ChangeSet handed to the engine. Resolution happens exactly
once, before compute(), and either completes or fails fatally.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable
import logging
import subprocess

from affected.core.enums import CompareMode
from affected.core.models import ChangeSet, normalize_path
from affected.errors.taxonomy import ChangeResolutionError

logger = logging.getLogger(__name__)


@runtime_checkable
class ChangeSource(Protocol):
    """Anything able to list the files changed between two revisions."""

    def resolve_changes(
        self,
        previous_ref: Optional[str],
        current_ref: Optional[str],
    ) -> ChangeSet:
        ...


class StaticChangeSource:
    """Change source for hosts that already hold the changed-file list."""

    def __init__(self, paths: Iterable[str] = (), force_all: bool = False):
        self._paths = list(paths)
        self._force_all = force_all

    def resolve_changes(
        self,
        previous_ref: Optional[str] = None,
        current_ref: Optional[str] = None,
    ) -> ChangeSet:
        if self._force_all:
            return ChangeSet.everything(reason="forced")
        return ChangeSet.of(self._paths)


def git_root(start: Union[str, Path]) -> Optional[Path]:
    """Walk up from start until a directory containing .git is found."""
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


class GitChangeSource:
    """
    Lists changed files with `git diff --name-only -z`.

    Returned paths are relative to project_dir; files outside it cannot
    belong to any module of the project and are dropped.
    """

    def __init__(
        self,
        project_dir: Union[str, Path] = ".",
        compare_mode: Union[CompareMode, str] = CompareMode.COMMIT,
        force_all: bool = False,
        git_executable: str = "git",
        timeout_seconds: Optional[float] = None,
    ):
        self._project_dir = Path(project_dir).resolve()
        if not isinstance(compare_mode, CompareMode):
            compare_mode = CompareMode(str(compare_mode).upper())
        self._compare_mode = compare_mode
        self._force_all = force_all
        self._git = git_executable
        self._timeout = timeout_seconds

    @property
    def compare_mode(self) -> CompareMode:
        return self._compare_mode

    def diff_command(self, previous_ref: str, current_ref: str) -> List[str]:
        """Build the git command line for the configured compare mode."""
        if self._compare_mode == CompareMode.TWO_DOT:
            revisions = [f"{previous_ref}..{current_ref}"]
        elif self._compare_mode == CompareMode.THREE_DOT:
            revisions = [f"{previous_ref}...{current_ref}"]
        else:
            revisions = [previous_ref, current_ref]
        # unquoted, NUL separated so non-ASCII paths come back verbatim
        return [self._git, "-c", "core.quotepath=off", "diff", "--name-only", "-z", *revisions]

    def resolve_changes(
        self,
        previous_ref: Optional[str],
        current_ref: Optional[str],
    ) -> ChangeSet:
        if self._force_all:
            logger.info("All modules forced to be affected")
            return ChangeSet.everything(reason="forced")

        if not previous_ref or not current_ref:
            logger.info("No revision pair to compare; treating everything as changed")
            return ChangeSet.everything(reason="missing revision")

        root = git_root(self._project_dir)
        if root is None:
            raise ChangeResolutionError(f"No git repository found above {self._project_dir}")

        command = self.diff_command(previous_ref, current_ref)
        output = self._run(command, root)

        prefix = normalize_path(self._project_dir.relative_to(root).as_posix())
        paths = []
        for entry in output.split("\0"):
            path = normalize_path(entry)
            if not path:
                continue
            if prefix:
                if not path.startswith(prefix + "/"):
                    logger.debug(f"Skipping {path}: outside project directory {prefix}")
                    continue
                path = path[len(prefix) + 1:]
            paths.append(path)

        logger.info(f"Resolved {len(paths)} changed files between {previous_ref} and {current_ref}")
        return ChangeSet.of(paths)

    def _run(self, command: List[str], cwd: Path) -> str:
        display = " ".join(command)
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd),
                capture_output=True,
                encoding="utf-8",
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ChangeResolutionError(f"git executable not found: {self._git}", command=display) from e
        except subprocess.TimeoutExpired as e:
            raise ChangeResolutionError(f"Timed out running: {display}", command=display) from e

        if completed.returncode != 0:
            raise ChangeResolutionError(
                f"Could not resolve changed files ({display}): {completed.stderr.strip()}",
                command=display,
                stderr=completed.stderr,
            )
        return completed.stdout
