"""Tests for CommandExecutor."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipit.core.result import Ok
from shipit.output.console import MockConsole
from shipit.services import executor as executor_mod
from shipit.services.executor import CommandExecutor


def test_dry_run_prints_without_running(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fail_run(cmd: list[str], cwd: Path, env: dict[str, str] | None = None):
        raise AssertionError(f"unexpected command: {cmd}")

    monkeypatch.setattr(executor_mod, "run_streaming", fail_run)
    console = MockConsole()

    result = CommandExecutor(cwd=tmp_path, console=console, dry_run=True).stream(
        ["ssh", "host", "cd www && git add ."]
    )

    assert result == Ok(None)
    assert console.messages == ["[dry-run] ssh host 'cd www && git add .'"]


def test_runs_in_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def fake_run(cmd: list[str], cwd: Path, env: dict[str, str] | None = None):
        calls.append((cmd, cwd))
        return Ok(None)

    monkeypatch.setattr(executor_mod, "run_streaming", fake_run)
    console = MockConsole()

    result = CommandExecutor(cwd=tmp_path, console=console).stream(["sbt", "clean"])

    assert result == Ok(None)
    assert calls == [(["sbt", "clean"], tmp_path)]
    assert console.messages == ["$ sbt clean"]
