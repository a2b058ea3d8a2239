# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from monorun.config import DEFAULT_PACKAGE_MANAGER, PACKAGE_MANAGER_ENV, MonorunConfig
from monorun.errors import InstallError, ManifestParseError, MonorunError, TaskExecutionError
from monorun.runner import run_task
from monorun.scheduler import TaskScheduler
from monorun.ui.console import Console, set_console

TASKS = ["build", "dev", "start"]


def _report(console: Console, error: MonorunError) -> None:
    """Turn a fatal orchestrator error into a structured stderr block."""
    if isinstance(error, ManifestParseError):
        console.print_error(
            "Invalid manifest",
            error.reason,
            details=[f"path: {error.path}"],
            suggestion="Fix the manifest and run again.",
        )
    elif isinstance(error, InstallError):
        details = [f"root: {error.root}"]
        if error.exit_code is not None:
            details.append(f"exit code: {error.exit_code}")
        console.print_error("Dependency installation failed", error.reason, details=details)
    elif isinstance(error, TaskExecutionError):
        details = [f"package: {error.package}", f"task: {error.task}"]
        if error.exit_code is not None:
            details.append(f"exit code: {error.exit_code}")
        console.print_error(
            "Task failed",
            error.reason or str(error),
            details=details,
            suggestion=error.details.get("hint"),
        )
    else:
        console.print_exception(error)


@click.command()
@click.argument("task", type=click.Choice(TASKS))
@click.option(
    "--root",
    default=".",
    show_default=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Workspace root (directory holding the workspace manifest)",
)
@click.option(
    "--package-manager",
    default=None,
    help=f"Package manager command (default: ${PACKAGE_MANAGER_ENV} or {DEFAULT_PACKAGE_MANAGER})",
)
@click.option("--install/--no-install", default=True, show_default=True, help="Run the install step before build")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show skipped packages and stack traces)",
)
def cli(task, root, package_manager, install, debug):
    """monorun: run build, dev or start across a pnpm-style workspace."""
    console = Console(debug=debug)
    set_console(console)

    try:
        config = MonorunConfig.from_env(root, package_manager=package_manager, install=install)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--package-manager")
    scheduler = TaskScheduler(config, console=console)

    try:
        results = run_task(task, config, scheduler=scheduler, console=console)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except MonorunError as e:
        console.print_results(scheduler.results)
        _report(console, e)
        if debug:
            console.print_exception(e)
        console.print_finished(ok=False)
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        console.print_finished(ok=False)
        sys.exit(1)

    console.print_results(results)
    console.print_finished(ok=True)


if __name__ == "__main__":
    cli()
