from .config import MonorunConfig
from .dag import resolve_dependencies, split_tiers, topo_sort
from .errors import InstallError, ManifestParseError, MonorunError, TaskExecutionError
from .model import Package, Tier, Workspace
from .runner import run_task
from .scheduler import TaskScheduler
from .workspace import discover_workspace

__all__ = [
    "MonorunConfig",
    "Package",
    "Tier",
    "Workspace",
    "discover_workspace",
    "resolve_dependencies",
    "topo_sort",
    "split_tiers",
    "TaskScheduler",
    "run_task",
    "MonorunError",
    "ManifestParseError",
    "InstallError",
    "TaskExecutionError",
]
