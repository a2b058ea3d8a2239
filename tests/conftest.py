from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from monorun.config import MonorunConfig
from monorun.model import Package, Tier
from monorun.ui.console import Console

# Stands in for pnpm. Invoked as: fake_pm.py LOG run TASK | fake_pm.py LOG install
# A script body is a ";"-separated list of: sleep N | touch FILE | exit N
FAKE_PM = r'''
import json, os, sys, time

log, args = sys.argv[1], sys.argv[2:]
with open(log, "a") as fh:
    fh.write(os.path.basename(os.getcwd()) + " " + " ".join(args) + "\n")

if args[0] == "install":
    sys.exit(3 if os.path.exists("install-fails") else 0)

with open("package.json") as fh:
    body = json.load(fh).get("scripts", {}).get(args[1], "")

for action in filter(None, (a.strip() for a in body.split(";"))):
    verb, _, arg = action.partition(" ")
    if verb == "sleep":
        time.sleep(float(arg))
    elif verb == "touch":
        open(arg, "w").close()
    elif verb == "exit":
        sys.exit(int(arg))
'''


def write_package(
    root: Path,
    rel: str,
    name: str,
    deps: tuple[str, ...] | list[str] = (),
    scripts: dict[str, str] | None = None,
) -> Path:
    d = root / rel
    d.mkdir(parents=True, exist_ok=True)
    manifest = {
        "name": name,
        "dependencies": {dep: "workspace:*" for dep in deps},
        "scripts": scripts or {},
    }
    (d / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    return d


def write_workspace(root: Path, *patterns: str) -> Path:
    lines = ["packages:"] + [f'  - "{p}"' for p in patterns]
    path = root / "pnpm-workspace.yaml"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def pkg(name: str, *deps: str, tier: Tier = Tier.NONE, scripts=("build", "dev", "start")) -> Package:
    return Package(
        name=name,
        directory=Path("/ws") / name,
        dependencies=tuple(deps),
        scripts=frozenset(scripts),
        tier=tier,
    )


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def fake_pm(tmp_path: Path) -> tuple[str, ...]:
    """Package-manager command prefix plus the log it appends every call to."""
    script = tmp_path / "fake_pm.py"
    script.write_text(FAKE_PM, encoding="utf-8")
    log = tmp_path / "pm.log"
    log.touch()
    return (sys.executable, str(script), str(log))


def read_log(fake_pm: tuple[str, ...]) -> list[str]:
    return Path(fake_pm[-1]).read_text(encoding="utf-8").splitlines()


@pytest.fixture
def config(workspace_root: Path, fake_pm) -> MonorunConfig:
    return MonorunConfig(root=workspace_root, package_manager=fake_pm)


@pytest.fixture
def console() -> Console:
    return Console(debug=True)
