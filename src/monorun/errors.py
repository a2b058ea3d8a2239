# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


class MonorunError(Exception):
    """Base class for every fatal orchestrator error."""


@dataclass
class ManifestParseError(MonorunError):
    """A workspace or package manifest could not be read or understood."""
    path: Path
    reason: str

    def __str__(self) -> str:
        return f"ManifestParseError: {self.reason}\npath={self.path}"


@dataclass
class InstallError(MonorunError):
    root: Path
    exit_code: int | None
    reason: str = "dependency installation failed"

    def __str__(self) -> str:
        lines = [f"InstallError: {self.reason}", f"root={self.root}"]
        if self.exit_code is not None:
            lines.append(f"exit_code={self.exit_code}")
        return "\n".join(lines)


@dataclass
class TaskExecutionError(MonorunError):
    """
    A package script exited non-zero (or could not be launched at all,
    in which case exit_code is None).
    """
    package: str
    task: str
    exit_code: int | None
    reason: str = ""
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        head = self.reason or f"'{self.task}' failed in {self.package}"
        lines = [f"TaskExecutionError: {head}", f"package={self.package}", f"task={self.task}"]
        if self.exit_code is not None:
            lines.append(f"exit_code={self.exit_code}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)
