# process.py
from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import Sequence

from .config import MonorunConfig
from .errors import InstallError, TaskExecutionError
from .model import Package

TOOL_HINTS = {
    "pnpm": "Install pnpm (npm install -g pnpm) or fix PATH.",
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "yarn": "Install yarn (npm install -g yarn) or fix PATH.",
    "bun": "Install bun or fix PATH.",
}


def _hint_for(argv: Sequence[str]) -> str:
    tool = Path(argv[0]).name
    return TOOL_HINTS.get(tool, f"Make sure '{tool}' is installed and on PATH.")


# seconds between exit-status checks of a running child
POLL_INTERVAL = 0.05


async def _spawn(argv: Sequence[str], cwd: Path) -> int:
    """
    Run argv in cwd with the child sharing our stdin/stdout/stderr, so output
    from concurrent children shows up live and interleaved.

    The child is a plain Popen, not owned by the event loop: if the run
    unwinds while it is still going (a failed sibling under `start`), it is
    neither killed on loop shutdown nor on garbage collection and runs to
    its own exit.
    """
    proc = subprocess.Popen(list(argv), cwd=str(cwd))
    while proc.poll() is None:
        await asyncio.sleep(POLL_INTERVAL)
    return proc.returncode


def script_command(config: MonorunConfig, task: str) -> list[str]:
    return [*config.package_manager, "run", task]


def install_command(config: MonorunConfig) -> list[str]:
    return [*config.package_manager, "install"]


async def run_script(package: Package, task: str, config: MonorunConfig) -> int:
    """
    `<package-manager> run <task>` inside the package directory.

    Returns the exit code (always 0); anything else is raised as
    TaskExecutionError.
    """
    argv = script_command(config, task)
    try:
        code = await _spawn(argv, package.directory)
    except OSError as e:
        raise TaskExecutionError(
            package=package.name,
            task=task,
            exit_code=None,
            reason=f"could not launch '{argv[0]}': {e}",
            details={"hint": _hint_for(argv)},
        ) from e

    if code != 0:
        raise TaskExecutionError(
            package=package.name,
            task=task,
            exit_code=code,
            reason=f"'{task}' exited with code {code} in {package.name}",
            details={"cwd": package.directory},
        )
    return code


async def run_install(config: MonorunConfig) -> int:
    """Workspace-wide `<package-manager> install` at the root."""
    argv = install_command(config)
    try:
        code = await _spawn(argv, config.root)
    except OSError as e:
        raise InstallError(
            root=config.root,
            exit_code=None,
            reason=f"could not launch '{argv[0]}': {e}. {_hint_for(argv)}",
        ) from e

    if code != 0:
        raise InstallError(root=config.root, exit_code=code)
    return code
