# scheduler.py
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set

from .config import MonorunConfig
from .dag import split_tiers
from .model import Package, Tier
from .process import run_install, run_script
from .ui.console import Console, get_console

RunFn = Callable[[Package, str, MonorunConfig], Awaitable[int]]
InstallFn = Callable[[MonorunConfig], Awaitable[int]]

# task name -> execution policy; anything unlisted runs sequentially like dev
POLICIES = {
    "build": "staged",
    "start": "parallel",
    "dev": "sequential",
}


def policy_for(task: str) -> str:
    return POLICIES.get(task, "sequential")


def _discard_outcome(future: asyncio.Future) -> None:
    # already reported through the console by _run_one
    if not future.cancelled():
        future.exception()


class TaskScheduler:
    """
    Launches one task across an already topologically sorted package list.

      staged      install once, libraries in parallel, then applications in parallel
      parallel    applications in parallel, returning on the first failure
      sequential  every package, one at a time, in sorted order

    Staged batches wait for every member to settle before reporting. No
    policy cancels siblings that are already running when one fails.
    """

    def __init__(
        self,
        config: MonorunConfig,
        *,
        run_fn: RunFn = run_script,
        install_fn: InstallFn = run_install,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.run_fn = run_fn
        self.install_fn = install_fn
        self.console = console or get_console()
        # package name -> "ok" | "skipped" | "failed"
        self.results: Dict[str, str] = {}
        # siblings still running after a parallel launch returned early
        self._running: Set[asyncio.Future] = set()

    async def run(self, task: str, packages: Iterable[Package]) -> Dict[str, str]:
        self.results = {}
        packages = list(packages)
        policy = policy_for(task)

        if policy == "staged":
            await self._staged(task, packages)
        elif policy == "parallel":
            _libraries, applications = split_tiers(packages)
            await self._launch_all(task, applications, f"Running '{task}' for all apps in parallel")
        else:
            await self._sequential(task, packages)

        return dict(self.results)

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    async def _staged(self, task: str, packages: List[Package]) -> None:
        if self.config.install:
            self.console.print_stage("Installing dependencies")
            await self.install_fn(self.config)
            self.console.print_info("✓ Dependencies installed")

        libraries, applications = split_tiers(packages)
        for p in packages:
            if p.tier is Tier.NONE:
                self.console.print_debug(f"{p.name} is neither a library nor an app; not part of '{task}'")

        await self._batch(task, libraries, f"Running '{task}' for packages in parallel")
        await self._batch(task, applications, f"Running '{task}' for apps in parallel")

    async def _sequential(self, task: str, packages: List[Package]) -> None:
        if packages:
            self.console.print_stage(f"Running '{task}' one package at a time")
        for p in packages:
            await self._run_one(task, p)

    async def _batch(self, task: str, packages: List[Package], title: str) -> None:
        if not packages:
            return
        self.console.print_stage(title)

        outcomes = await asyncio.gather(
            *(self._run_one(task, p) for p in packages),
            return_exceptions=True,
        )
        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            raise failures[0]

    async def _launch_all(self, task: str, packages: List[Package], title: str) -> None:
        """
        Launch every package and return as soon as all have exited or one
        has failed. Siblings still running after a failure are left alone.
        """
        if not packages:
            return
        self.console.print_stage(title)

        launched = [asyncio.ensure_future(self._run_one(task, p)) for p in packages]
        done, pending = await asyncio.wait(launched, return_when=asyncio.FIRST_EXCEPTION)

        for t in pending:
            t.add_done_callback(_discard_outcome)
            t.add_done_callback(self._running.discard)
        self._running.update(pending)

        for t in launched:
            if t in done and t.exception() is not None:
                raise t.exception()

    # ------------------------------------------------------------------
    # Single package
    # ------------------------------------------------------------------

    async def _run_one(self, task: str, package: Package) -> None:
        if not package.has_script(task):
            self.results[package.name] = "skipped"
            self.console.print_skip(task, package.name)
            return

        self.console.print_launch(task, package.name)
        try:
            await self.run_fn(package, task, self.config)
        except Exception as e:
            self.results[package.name] = "failed"
            details = getattr(e, "details", None) or {}
            self.console.print_failure(
                task,
                package.name,
                exit_code=getattr(e, "exit_code", None),
                hint=details.get("hint"),
            )
            raise

        self.results[package.name] = "ok"
        self.console.print_success(task, package.name)
