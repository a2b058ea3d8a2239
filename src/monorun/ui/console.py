"""Console output formatting utilities for monorun."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show skipped packages and stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title), flush=True)

    def print_run_started(
        self,
        root: str,
        task: str,
        package_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Workspace: {root}")
        print(f"Task: {task}")
        print(f"Packages: {package_count}")
        print(f"Started at: {_now()}")
        print(flush=True)

    def print_stage(self, title: str) -> None:
        self.print_header(title)

    def print_launch(self, task: str, name: str) -> None:
        print(f"\n▶ {task} › {name}", flush=True)

    def print_skip(self, task: str, name: str) -> None:
        """Packages without the script are only mentioned in debug mode."""
        if self.debug:
            print(f"⏭ {task} › {name} (no '{task}' script)")

    def print_success(self, task: str, name: str) -> None:
        print(f"✓ {task} › {name}", flush=True)

    def print_failure(
        self,
        task: str,
        name: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """Print a package failure line (to stderr)."""
        print(f"✗ {task} › {name}", file=sys.stderr, flush=True)
        if exit_code is not None:
            print(f"  Exit code: {exit_code}", file=sys.stderr)
        if hint:
            print(f"  Hint: {hint}", file=sys.stderr)

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        if not results:
            return
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            print(f"  {name}: {status_display}")

    def print_finished(self, ok: bool) -> None:
        if ok:
            print(f"\n✨ Completed successfully at {_now()}")
        else:
            print(f"\nFailed at {_now()}", file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message, flush=True)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
