"""
cli/ - Command Line Interface

Commands:
- compute: list affected modules
- run: run the target task of affected modules
- owners: module owning each path
- dependents: transitive dependents of modules
"""

from .core import (
    CLIContext,
    OutputFormat,
    CommandResult,
    CommandRegistry,
    CLICommand,
)

from .commands import (
    ComputeCommand,
    RunCommand,
    OwnersCommand,
    DependentsCommand,
)

from .main import main


__all__ = [
    # Core
    "CLIContext",
    "OutputFormat",
    "CommandResult",
    "CommandRegistry",
    "CLICommand",
    # Commands
    "ComputeCommand",
    "RunCommand",
    "OwnersCommand",
    "DependentsCommand",
    # Entry point
    "main",
]
