"""
cli/main.py - Command line entry point
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys

from .core import CLIContext, CommandRegistry, OutputFormat, format_output
from .commands import register_default_commands
from affected.bootstrap.config import load_config
from affected.bootstrap.entrypoints import setup_logging_from_config
from affected.core.registry import ModuleRegistry
from affected.errors.taxonomy import AffectedError

logger = logging.getLogger("cli")

DEFAULT_REGISTRY = "affected-modules.json"


def build_parser(commands: CommandRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="affected",
        description="Select the modules of a multi-module build affected by a change",
    )
    parser.add_argument("--registry", "-r", default=DEFAULT_REGISTRY,
                        help=f"Module registry file, JSON or YAML (default {DEFAULT_REGISTRY})")
    parser.add_argument("--config", "-c", help="Configuration file, JSON or YAML")
    parser.add_argument("--project-dir", "-p", default=".", help="Project root directory")
    parser.add_argument("--format", "-f", choices=[f.value for f in OutputFormat],
                        default=OutputFormat.TEXT.value, help="Output format")
    parser.add_argument("--debug", action="store_true", help="Verbose decision logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for command in commands.get_all().values():
        sub = subparsers.add_parser(command.name, aliases=command.aliases, help=command.description)
        command.configure_parser(sub)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    commands = CommandRegistry()
    register_default_commands(commands)

    parser = build_parser(commands)
    args = parser.parse_args(argv)

    try:
        overrides = {"debug": True} if args.debug else None
        config = load_config(args.config, overrides)
        setup_logging_from_config(config.logging, debug=config.debug)

        project_dir = Path(args.project_dir)
        registry_path = Path(args.registry)
        if not registry_path.is_absolute() and not registry_path.exists():
            registry_path = project_dir / registry_path
        registry = ModuleRegistry.from_file(registry_path)
    except AffectedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    ctx = CLIContext(
        registry=registry,
        config=config,
        project_dir=project_dir,
        output_format=OutputFormat(args.format),
        verbose=config.debug,
    )

    command = commands.get(args.command)
    result = command.execute(ctx, args)

    output = format_output(result, ctx.output_format)
    if output:
        print(output, file=sys.stdout if result.success else sys.stderr)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
