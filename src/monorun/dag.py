# dag.py
from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Set, Tuple

from .model import Package, Tier

if TYPE_CHECKING:
    from .config import MonorunConfig


def classify_tier(directory: Path, config: "MonorunConfig") -> Tier:
    """
    Tier from directory layout: anything under a `packages` segment is a
    library, anything under `apps` an application. Only the part of the path
    below the workspace root is looked at.
    """
    directory = Path(directory)
    try:
        parts = directory.relative_to(config.root).parts
    except ValueError:
        parts = directory.parts

    if config.library_segment in parts:
        return Tier.LIBRARY
    if config.application_segment in parts:
        return Tier.APPLICATION
    return Tier.NONE


def resolve_dependencies(packages: Iterable[Package]) -> List[Package]:
    """
    Narrow every package's dependencies to names present in the workspace.

    External dependencies (registry packages) are dropped without comment;
    they are the common case and cannot be ordered anyway.
    """
    packages = list(packages)
    names: Set[str] = {p.name for p in packages}

    resolved: List[Package] = []
    for p in packages:
        deps: List[str] = []
        for d in p.dependencies:
            if d in names and d != p.name and d not in deps:
                deps.append(d)
        resolved.append(replace(p, dependencies=tuple(deps)))
    return resolved


def topo_sort(packages: Iterable[Package]) -> List[Package]:
    """
    Depth-first topological order.

    Dependencies are visited before their dependents, in the order they are
    declared; unrelated packages keep the order they were first reached in.
    A package is marked seen before its dependencies are visited, so a cycle
    ends the walk instead of looping; the order inside a cycle is whatever
    the walk produced.
    """
    packages = list(packages)
    by_name: Dict[str, Package] = {}
    for p in packages:
        by_name.setdefault(p.name, p)

    seen: Set[str] = set()
    order: List[Package] = []

    for start in packages:
        if start.name in seen:
            continue
        seen.add(start.name)
        # explicit stack of (package, remaining dependencies); deep chains
        # must not hit the recursion limit
        stack: List[Tuple[Package, Iterator[str]]] = [(start, iter(start.dependencies))]
        while stack:
            p, deps = stack[-1]
            for d in deps:
                dep = by_name.get(d)
                if dep is None or dep.name in seen:
                    continue
                seen.add(dep.name)
                stack.append((dep, iter(dep.dependencies)))
                break
            else:
                stack.pop()
                order.append(p)

    return order


def split_tiers(ordered: Iterable[Package]) -> Tuple[List[Package], List[Package]]:
    """
    (libraries, applications), each in the order given.
    Packages in neither tier appear in neither list.
    """
    libraries: List[Package] = []
    applications: List[Package] = []
    for p in ordered:
        if p.tier is Tier.LIBRARY:
            libraries.append(p)
        elif p.tier is Tier.APPLICATION:
            applications.append(p)
    return libraries, applications
