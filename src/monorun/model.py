# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional


class Tier(str, Enum):
    """Scheduling-only grouping of packages, derived from directory layout."""
    LIBRARY = "library"
    APPLICATION = "application"
    NONE = "none"


@dataclass(frozen=True)
class Package:
    """
    A workspace member: one directory with its own manifest.

    `dependencies` holds every declared name straight out of the manifest
    until the graph builder narrows it down to workspace members.
    """
    name: str
    directory: Path
    dependencies: tuple[str, ...] = ()
    scripts: frozenset[str] = frozenset()
    tier: Tier = Tier.NONE

    def has_script(self, task: str) -> bool:
        return task in self.scripts


@dataclass
class Workspace:
    """All discovered packages, in discovery order."""
    root: Path
    packages: list[Package] = field(default_factory=list)

    def get(self, name: str) -> Optional[Package]:
        for p in self.packages:
            if p.name == name:
                return p
        return None

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    def __len__(self) -> int:
        return len(self.packages)
