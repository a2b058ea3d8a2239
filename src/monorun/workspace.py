# workspace.py
from __future__ import annotations

import json
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Optional

from .config import MonorunConfig
from .errors import ManifestParseError
from .model import Package, Workspace
from .dag import classify_tier

# pnpm never treats installed dependencies as workspace members
IGNORED_SEGMENTS = {"node_modules"}


# ----------------------------------------------------------------------
# Workspace manifest
# ----------------------------------------------------------------------

def parse_workspace_patterns(text: str) -> List[str]:
    """
    Pull membership globs out of a workspace manifest.

    This is deliberately not a YAML reader: every line whose stripped form
    starts with a dash is a pattern, quotes are dropped, everything else
    is ignored.

        packages:
          - "packages/*"
          - 'apps/*'
          - "!**/test/**"
    """
    patterns: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith("-"):
            continue
        pattern = line[1:].strip().replace('"', "").replace("'", "")
        if pattern:
            patterns.append(pattern)
    return patterns


def read_workspace_patterns(config: MonorunConfig) -> List[str]:
    path = config.workspace_manifest_path
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestParseError(path, "workspace manifest not found") from None
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, f"could not read workspace manifest: {e}") from e
    return parse_workspace_patterns(text)


# ----------------------------------------------------------------------
# Pattern expansion
# ----------------------------------------------------------------------

def _strip_dot_slash(pattern: str) -> str:
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def _glob_dirs(root: Path, pattern: str) -> List[Path]:
    pattern = _strip_dot_slash(pattern.rstrip("/"))
    if pattern in ("", "."):
        return [root]
    if Path(pattern).is_absolute():
        return []

    matches = [p for p in root.glob(pattern) if p.is_dir()]
    return sorted(p.resolve() for p in matches)


def _is_excluded(rel: str, exclusions: List[str]) -> bool:
    # "**/test/**" should also drop the "test" directory itself
    return any(fnmatch(rel, pat) or fnmatch(rel + "/", pat) for pat in exclusions)


def expand_patterns(root: Path, patterns: List[str]) -> List[Path]:
    """
    Expand membership globs against the filesystem (directories only).

    Order is pattern order, then path order within a pattern; a directory
    matched twice keeps its first position. Patterns starting with "!"
    remove matches instead of adding them.
    """
    root = Path(root).resolve()
    includes = [p for p in patterns if not p.startswith("!")]
    exclusions = [_strip_dot_slash(p[1:]) for p in patterns if p.startswith("!")]

    seen: set[Path] = set()
    dirs: List[Path] = []
    for pattern in includes:
        for d in _glob_dirs(root, pattern):
            if d in seen:
                continue
            try:
                rel = d.relative_to(root).as_posix()
            except ValueError:
                # symlinked outside the workspace
                rel = d.as_posix()
            if IGNORED_SEGMENTS.intersection(Path(rel).parts):
                continue
            if exclusions and _is_excluded(rel, exclusions):
                continue
            seen.add(d)
            dirs.append(d)
    return dirs


# ----------------------------------------------------------------------
# Package manifests
# ----------------------------------------------------------------------

def _mapping_keys(data: dict, key: str, path: Path) -> List[str]:
    """Keys of an optional object-valued manifest field; missing or null means empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, dict):
        raise ManifestParseError(path, f"'{key}' must be an object, got {type(value).__name__}")
    return list(value.keys())


def load_package(directory: Path, config: MonorunConfig) -> Optional[Package]:
    """
    Load one package from its manifest.

    Returns None when the directory has no manifest; anything present but
    unusable raises ManifestParseError.
    """
    directory = Path(directory).resolve()
    manifest = directory / config.package_manifest
    if not manifest.is_file():
        return None

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestParseError(manifest, f"invalid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(manifest, f"could not read manifest: {e}") from e

    if not isinstance(data, dict):
        raise ManifestParseError(manifest, "manifest must be a JSON object")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestParseError(manifest, "manifest has no 'name'")

    return Package(
        name=name,
        directory=directory,
        dependencies=tuple(_mapping_keys(data, "dependencies", manifest)),
        scripts=frozenset(_mapping_keys(data, "scripts", manifest)),
        tier=classify_tier(directory, config),
    )


def discover_workspace(config: MonorunConfig) -> Workspace:
    """
    Find every workspace member under config.root.

    Directories matching a pattern but lacking a manifest are skipped.
    The returned packages still carry their raw declared dependencies.
    """
    patterns = read_workspace_patterns(config)
    packages: List[Package] = []
    for d in expand_patterns(config.root, patterns):
        pkg = load_package(d, config)
        if pkg is not None:
            packages.append(pkg)
    return Workspace(root=config.root, packages=packages)
