"""End-to-end runs against synthetic workspaces with a stand-in package manager."""

from __future__ import annotations

import time

import pytest

from conftest import read_log, write_package, write_workspace
from monorun.errors import ManifestParseError, TaskExecutionError
from monorun.runner import plan, run_task


def test_plan_orders_and_resolves(config):
    write_workspace(config.root, "packages/*", "apps/*")
    write_package(config.root, "apps/web", "web", deps=["ui", "next"])
    write_package(config.root, "packages/ui", "ui", deps=["utils", "react"])
    write_package(config.root, "packages/utils", "utils")

    ordered = plan(config)
    assert [p.name for p in ordered] == ["utils", "ui", "web"]
    assert ordered[2].dependencies == ("ui",)


def test_build_libraries_before_app(config, fake_pm, console):
    write_workspace(config.root, "packages/*", "apps/*")
    write_package(config.root, "packages/a", "a", scripts={"build": "sleep 0.2"})
    write_package(config.root, "packages/b", "b", deps=["a"], scripts={"build": "sleep 0.1"})
    write_package(config.root, "apps/c", "c", deps=["b"], scripts={"build": "touch out"})

    results = run_task("build", config, console=console)

    assert results == {"a": "ok", "b": "ok", "c": "ok"}
    log = read_log(fake_pm)
    assert log[0] == f"{config.root.name} install"
    assert log[-1] == "c run build"
    assert set(log[1:3]) == {"a run build", "b run build"}


def test_dev_runs_one_at_a_time(config, fake_pm, console):
    write_workspace(config.root, "packages/*", "apps/*")
    write_package(config.root, "apps/b", "b", deps=["a"], scripts={"dev": "touch b-ran"})
    write_package(config.root, "packages/a", "a", scripts={"dev": "sleep 0.2; touch a-ran"})

    run_task("dev", config, console=console)

    assert read_log(fake_pm) == ["a run dev", "b run dev"]
    a_done = (config.root / "packages" / "a" / "a-ran").stat().st_mtime
    b_done = (config.root / "apps" / "b" / "b-ran").stat().st_mtime
    assert a_done <= b_done


def test_start_failure_returns_promptly_and_sibling_finishes(config, fake_pm, console):
    write_workspace(config.root, "apps/*")
    write_package(config.root, "apps/a", "a", scripts={"start": "sleep 2; touch finished"})
    write_package(config.root, "apps/b", "b", scripts={"start": "exit 1"})
    finished = config.root / "apps" / "a" / "finished"

    began = time.monotonic()
    with pytest.raises(TaskExecutionError) as exc:
        run_task("start", config, console=console)
    elapsed = time.monotonic() - began

    assert exc.value.package == "b"
    assert elapsed < 1.5
    assert not finished.exists()

    # the sibling outlives the run and exits on its own
    deadline = time.monotonic() + 10
    while not finished.exists() and time.monotonic() < deadline:
        time.sleep(0.05)
    assert finished.exists()
    assert sorted(read_log(fake_pm)) == ["a run start", "b run start"]


def test_packages_without_script_are_not_invoked(config, fake_pm, console):
    write_workspace(config.root, "packages/*")
    write_package(config.root, "packages/a", "a", scripts={"build": ""})
    write_package(config.root, "packages/docs", "docs", scripts={"lint": ""})

    results = run_task("build", config, console=console)

    assert results == {"a": "ok", "docs": "skipped"}
    assert "docs run build" not in read_log(fake_pm)


def test_bad_manifest_runs_nothing(config, fake_pm, console):
    write_workspace(config.root, "packages/*")
    write_package(config.root, "packages/a", "a", scripts={"build": ""})
    bad = config.root / "packages" / "b"
    bad.mkdir()
    (bad / "package.json").write_text("{")

    with pytest.raises(ManifestParseError):
        run_task("build", config, console=console)
    assert read_log(fake_pm) == []
