"""
runner/task_runner.py - Run target tasks of affected modules

External collaborator consuming a DecisionSet: for each affected module
it shells out to the build tool wrapper with that module's task path.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union
import logging
import platform
import shlex
import subprocess
import threading

from affected.core.registry import ModuleRegistry
from affected.engine.decisions import DecisionSet
from affected.errors.taxonomy import TaskExecutionError

logger = logging.getLogger(__name__)


def default_wrapper() -> str:
    """Build tool wrapper script for the current platform."""
    if platform.system().startswith("Windows"):
        return "gradlew.bat"
    return "./gradlew"


@dataclass
class TaskInvocation:
    """A single planned command for one module."""

    module_id: str
    task_path: str
    argv: List[str] = field(default_factory=list)

    @property
    def command_line(self) -> str:
        return " ".join(shlex.quote(a) for a in self.argv)


@dataclass
class RunResult:
    """Outcome of running the planned invocations."""

    executed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class CommandTaskRunner:
    """
    Executes `<wrapper> <task path> <extra args>` per affected module.

    Modules run in dependency order when an order function is given,
    otherwise sorted by id. The first failure stops the run.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        working_dir: Union[str, Path] = ".",
        wrapper: Optional[str] = None,
        extra_args: Sequence[str] = (),
        order: Optional[Callable[[List[str]], List[str]]] = None,
    ):
        self._registry = registry
        self._working_dir = Path(working_dir)
        self._wrapper = wrapper or default_wrapper()
        self._extra_args = list(extra_args)
        self._order = order

    def plan(self, decisions: DecisionSet) -> List[TaskInvocation]:
        """Commands that run() would execute, without executing them."""
        affected = decisions.affected_modules()
        if self._order is not None:
            affected = self._order(affected)

        invocations = []
        for module_id in affected:
            module = self._registry.get(module_id)
            if module is None:
                continue
            task_path = module.task_path(decisions.target_task_name)
            argv = [*shlex.split(self._wrapper), task_path, *self._extra_args]
            invocations.append(TaskInvocation(module_id=module_id, task_path=task_path, argv=argv))
        return invocations

    def run(self, decisions: DecisionSet) -> RunResult:
        """
        Run every planned invocation.

        Raises:
            TaskExecutionError: on the first non-zero exit code
        """
        result = RunResult(skipped=decisions.skipped_modules())

        for invocation in self.plan(decisions):
            logger.info(f"Running {invocation.command_line}")
            exit_code = self._execute(invocation)
            if exit_code != 0:
                raise TaskExecutionError(invocation.module_id, invocation.command_line, exit_code)
            result.executed.append(invocation.module_id)

        logger.info(f"Executed {len(result.executed)} tasks, skipped {len(result.skipped)} modules")
        return result

    def _execute(self, invocation: TaskInvocation) -> int:
        try:
            process = subprocess.Popen(
                invocation.argv,
                cwd=str(self._working_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            logger.error(f"Could not start {invocation.command_line}: {e}")
            return 127

        # stderr drains on its own thread so neither pipe can fill up and block the child
        errors = threading.Thread(target=_log_lines, args=(process.stderr, logging.ERROR), daemon=True)
        errors.start()
        _log_lines(process.stdout, logging.INFO)
        errors.join()
        return process.wait()


def _log_lines(stream, level: int) -> None:
    with stream:
        for line in stream:
            logger.log(level, line.rstrip())
