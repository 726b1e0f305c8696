"""
runner/ - Task execution for affected modules
"""

from .task_runner import (
    CommandTaskRunner,
    TaskInvocation,
    RunResult,
    default_wrapper,
)

__all__ = [
    "CommandTaskRunner",
    "TaskInvocation",
    "RunResult",
    "default_wrapper",
]
