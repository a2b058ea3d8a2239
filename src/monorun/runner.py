# runner.py
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from .config import MonorunConfig
from .dag import resolve_dependencies, topo_sort
from .model import Package
from .scheduler import TaskScheduler
from .ui.console import Console, get_console
from .workspace import discover_workspace


def plan(config: MonorunConfig) -> List[Package]:
    """Discover the workspace and return its packages in dependency order."""
    workspace = discover_workspace(config)
    return topo_sort(resolve_dependencies(workspace.packages))


async def run_task_async(
    task: str,
    config: MonorunConfig,
    *,
    scheduler: Optional[TaskScheduler] = None,
    console: Optional[Console] = None,
) -> Dict[str, str]:
    console = console or get_console()
    ordered = plan(config)
    console.print_run_started(root=str(config.root), task=task, package_count=len(ordered))
    console.print_debug("order: " + ", ".join(p.name for p in ordered))

    scheduler = scheduler or TaskScheduler(config, console=console)
    return await scheduler.run(task, ordered)


def run_task(
    task: str,
    config: MonorunConfig,
    *,
    scheduler: Optional[TaskScheduler] = None,
    console: Optional[Console] = None,
) -> Dict[str, str]:
    """
    Run `task` across the workspace at config.root.

    Returns package name -> status ("ok" / "skipped"). Any fatal condition
    (ManifestParseError, InstallError, TaskExecutionError) is raised.
    """
    return asyncio.run(run_task_async(task, config, scheduler=scheduler, console=console))
