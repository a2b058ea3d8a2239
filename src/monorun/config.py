# config.py
from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path

DEFAULT_WORKSPACE_MANIFEST = "pnpm-workspace.yaml"
DEFAULT_PACKAGE_MANIFEST = "package.json"
DEFAULT_PACKAGE_MANAGER = "pnpm"

PACKAGE_MANAGER_ENV = "MONORUN_PACKAGE_MANAGER"


@dataclass(frozen=True)
class MonorunConfig:
    """
    Everything a run needs to know about where it is and what to call.

    Passed explicitly into discovery, scheduling and the process runner so
    nothing depends on the current working directory.
    """
    root: Path
    workspace_manifest: str = DEFAULT_WORKSPACE_MANIFEST
    package_manifest: str = DEFAULT_PACKAGE_MANIFEST
    package_manager: tuple[str, ...] = (DEFAULT_PACKAGE_MANAGER,)

    # path segments used to split packages into tiers
    library_segment: str = "packages"
    application_segment: str = "apps"

    install: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root).expanduser().resolve())
        if isinstance(self.package_manager, str):
            object.__setattr__(self, "package_manager", tuple(shlex.split(self.package_manager)))
        if not self.package_manager:
            raise ValueError("package_manager must name a command")

    @property
    def workspace_manifest_path(self) -> Path:
        return self.root / self.workspace_manifest

    @classmethod
    def from_env(cls, root: str | Path = ".", **overrides) -> "MonorunConfig":
        """Build a config for `root`, taking the package manager from the environment if set."""
        pm = os.environ.get(PACKAGE_MANAGER_ENV)
        if pm and overrides.get("package_manager") is None:
            overrides["package_manager"] = tuple(shlex.split(pm))
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return cls(root=Path(root), **overrides)
