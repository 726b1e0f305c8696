"""
cli/commands.py - CLI command implementations
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import argparse
import shlex
import sys

from .core import CLICommand, CLIContext, CommandResult, OutputFormat
from affected.changes.sources import GitChangeSource, StaticChangeSource
from affected.core.models import ChangeSet
from affected.dependencies.ownership import OwnershipMapper
from affected.engine.decisions import DecisionSet
from affected.engine.engine import AffectedSetEngine
from affected.errors.taxonomy import AffectedError
from affected.runner.task_runner import CommandTaskRunner


def _split(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def add_compute_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by commands that compute a decision set."""
    parser.add_argument("--target", "-t", dest="target_task_name", help="Task to gate per module")
    parser.add_argument("--mode", "-m", help="ONLY_DIRECT or INCLUDE_DEPENDENTS")
    parser.add_argument("--always-run", help="Comma separated module ids that always run")
    parser.add_argument("--never-run", help="Comma separated module ids that never run")
    parser.add_argument("--allow", dest="allow_list", help="Comma separated module ids allowed to run")
    parser.add_argument("--affects-all", action="append", dest="affects_all_patterns",
                        help="Regex forcing every module to run (repeatable)")
    parser.add_argument("--ignore", action="append", dest="ignored_patterns",
                        help="Regex of files to ignore (repeatable)")

    changes = parser.add_argument_group("changes")
    changes.add_argument("--files", nargs="*", help="Changed files, instead of asking git")
    changes.add_argument("--files-from", help="Read changed files from a file ('-' for stdin)")
    changes.add_argument("--all", action="store_true", dest="run_all", help="Treat everything as changed")
    changes.add_argument("--prev", dest="previous_commit", help="Previous revision")
    changes.add_argument("--commit", help="Current revision")
    changes.add_argument("--compare-mode", help="COMMIT, TWO_DOT or THREE_DOT")


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Configuration values given on the command line."""
    overrides = {
        "target_task_name": args.target_task_name,
        "mode": args.mode,
        "always_run": _split(args.always_run),
        "never_run": _split(args.never_run),
        "allow_list": _split(args.allow_list),
        "affects_all_patterns": args.affects_all_patterns,
        "ignored_patterns": args.ignored_patterns,
        "previous_commit": args.previous_commit,
        "commit": args.commit,
        "compare_mode": args.compare_mode,
    }
    if args.run_all:
        overrides["run_all"] = True
    return {k: v for k, v in overrides.items() if v is not None}


def read_files_list(source: str) -> List[str]:
    if source == "-":
        return [line.strip() for line in sys.stdin if line.strip()]
    with open(source) as f:
        return [line.strip() for line in f if line.strip()]


def resolve_change_set(ctx: CLIContext, args: argparse.Namespace) -> ChangeSet:
    """Explicit file list when given, git otherwise."""
    config = ctx.config

    if args.files is not None or args.files_from:
        paths = list(args.files or [])
        if args.files_from:
            paths.extend(read_files_list(args.files_from))
        return StaticChangeSource(paths, force_all=config.run_all).resolve_changes()

    source = GitChangeSource(
        project_dir=ctx.project_dir,
        compare_mode=config.resolved_compare_mode(),
        force_all=config.run_all,
    )
    return source.resolve_changes(config.previous_commit, config.commit)


def compute_decisions(ctx: CLIContext, args: argparse.Namespace) -> DecisionSet:
    ctx.config.apply(config_overrides(args))
    change_set = resolve_change_set(ctx, args)
    return AffectedSetEngine(ctx.registry).compute(change_set, ctx.config)


def decision_result(ctx: CLIContext, decisions: DecisionSet) -> CommandResult:
    affected = decisions.affected_modules()
    message = (
        f"{len(affected)} of {len(decisions.modules)} modules affected "
        f"for task {decisions.target_task_name}"
    )

    if ctx.output_format == OutputFormat.JSON:
        data: Any = decisions.to_dict()
    else:
        data = {"affected": affected, "skipped": decisions.skipped_modules()}
        if ctx.verbose:
            data.update(decisions.debug_snapshot())
            data["unowned_files"] = list(decisions.unowned_files)

    return CommandResult(success=True, message=message, data=data, items=affected)


def build_runner(ctx: CLIContext, wrapper: Optional[str] = None, task_args: str = "") -> CommandTaskRunner:
    """Task runner in dependency order with configured and command line arguments."""
    extra = list(ctx.config.command_line_args)
    extra.extend(shlex.split(task_args))
    return CommandTaskRunner(
        ctx.registry,
        working_dir=ctx.project_dir,
        wrapper=wrapper,
        extra_args=extra,
        order=AffectedSetEngine(ctx.registry).dependency_graph().build_order,
    )


def run_result(decisions: DecisionSet, runner: CommandTaskRunner) -> CommandResult:
    result = runner.run(decisions)
    return CommandResult(
        success=True,
        message=f"Ran {decisions.target_task_name} in {len(result.executed)} modules",
        data={"executed": result.executed, "skipped": result.skipped},
        items=result.executed,
    )


class ComputeCommand(CLICommand):
    """Compute the affected modules."""

    name = "compute"
    description = "List modules whose target task must run"
    aliases = ["affected"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        add_compute_arguments(parser)

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        if not ctx.config.enabled:
            return CommandResult(success=True, message="affected: disabled")
        try:
            decisions = compute_decisions(ctx, args)
            # command line mode runs the tasks instead of listing them
            if ctx.config.command_line:
                return run_result(decisions, build_runner(ctx))
        except AffectedError as e:
            return CommandResult(success=False, error=str(e), exit_code=1)
        return decision_result(ctx, decisions)


class RunCommand(CLICommand):
    """Compute the affected modules and run their target task."""

    name = "run"
    description = "Run the target task of every affected module"
    aliases = ["exec"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        add_compute_arguments(parser)
        parser.add_argument("--wrapper", help="Build tool wrapper (default ./gradlew)")
        parser.add_argument("--dry-run", action="store_true", help="Print commands without running them")
        parser.add_argument("--task-args", default="",
                            help="Extra arguments passed to every task invocation")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        if not ctx.config.enabled:
            return CommandResult(success=True, message="affected: disabled")
        try:
            decisions = compute_decisions(ctx, args)
            runner = build_runner(ctx, args.wrapper, args.task_args)

            if args.dry_run:
                commands = [inv.command_line for inv in runner.plan(decisions)]
                return CommandResult(
                    success=True,
                    message=f"{len(commands)} commands planned",
                    data={"commands": commands},
                    items=commands,
                )

            return run_result(decisions, runner)
        except AffectedError as e:
            return CommandResult(success=False, error=str(e), exit_code=1)


class OwnersCommand(CLICommand):
    """Show which module owns each file."""

    name = "owners"
    description = "Show the module owning each path"
    aliases = ["owner"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("paths", nargs="+", help="File paths relative to the project root")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        mapper = OwnershipMapper(ctx.registry)
        owners = mapper.ownership_map(args.paths)
        return CommandResult(
            success=True,
            message=f"Owners of {len(owners)} paths",
            data={path: owner or "-" for path, owner in owners.items()},
            items=[f"{path}\t{owner or '-'}" for path, owner in owners.items()],
        )


class DependentsCommand(CLICommand):
    """Show transitive dependents of modules."""

    name = "dependents"
    description = "List modules depending on the given modules"
    aliases = ["rdeps"]

    def configure_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("modules", nargs="+", help="Module ids")
        parser.add_argument("--include-seeds", action="store_true", help="Include the given modules")

    def execute(self, ctx: CLIContext, args: argparse.Namespace) -> CommandResult:
        unknown = [m for m in args.modules if m not in ctx.registry]
        if unknown:
            return CommandResult(success=False, error=f"Unknown modules: {', '.join(unknown)}", exit_code=1)

        graph = AffectedSetEngine(ctx.registry).dependency_graph()
        dependents = sorted(graph.dependents_of(args.modules, include_seeds=args.include_seeds))
        return CommandResult(
            success=True,
            message=f"{len(dependents)} dependent modules",
            data={"dependents": dependents},
            items=dependents,
        )


def register_default_commands(registry) -> None:
    for command in (ComputeCommand(), RunCommand(), OwnersCommand(), DependentsCommand()):
        registry.register(command)
