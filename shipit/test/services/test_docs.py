"""Tests for docs publishing."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipit.core.config import DocsConfig, ReleaseConfig
from shipit.core.result import Err, Ok
from shipit.output.console import MockConsole
from shipit.platform.process import ProcessError
from shipit.services import executor as executor_mod
from shipit.services.docs import DocsError, DocsPublisher
from shipit.services.executor import CommandExecutor
from shipit.services.remote import RemoteServer


def _publisher(tmp_path: Path, *, dry_run: bool = False, archive: bool = True) -> DocsPublisher:
    config = ReleaseConfig(
        repo_root=tmp_path,
        server="relay.example.org",
        path="www2",
        docs=DocsConfig(project="akka-http", source_dir="site", archive=archive),
    )
    executor = CommandExecutor(cwd=tmp_path, console=MockConsole(), dry_run=dry_run)
    return DocsPublisher(config, RemoteServer(config.server, config.path, executor), executor)


def _record(monkeypatch: pytest.MonkeyPatch, fail_on: str | None = None) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_stream(cmd: list[str], cwd: Path, env=None):
        calls.append(cmd)
        if fail_on and cmd[0] == fail_on:
            return Err(ProcessError(tuple(cmd), 1, "", ""))
        return Ok(None)

    monkeypatch.setattr(executor_mod, "run_streaming", fake_stream)
    return calls


def test_missing_docs_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _record(monkeypatch)

    result = _publisher(tmp_path).publish("10.2.1")

    assert isinstance(result, Err)
    assert isinstance(result.error, DocsError)
    assert calls == []


def test_sync_then_archive_then_upload(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "site").mkdir()
    calls = _record(monkeypatch)
    publisher = _publisher(tmp_path)

    assert publisher.publish("10.2.1") == Ok(None)

    archive = tmp_path / "target" / "release" / "akka-http-docs-10.2.1.tgz"
    assert [c[0] for c in calls] == ["rsync", "tar", "rsync"]
    assert calls[0][-1] == "relay.example.org:www2/docs/akka-http/10.2.1/"
    assert calls[1] == ["tar", "-czf", str(archive), "-C", str(tmp_path / "site"), "."]
    assert calls[2][-1] == "relay.example.org:www2/downloads/"
    assert archive.parent.is_dir()


def test_archive_disabled(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "site").mkdir()
    calls = _record(monkeypatch)

    assert _publisher(tmp_path, archive=False).publish("10.2.1") == Ok(None)
    assert [c[0] for c in calls] == ["rsync"]


def test_tar_failure_stops_upload(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "site").mkdir()
    calls = _record(monkeypatch, fail_on="tar")

    result = _publisher(tmp_path).publish("10.2.1")

    assert isinstance(result, Err)
    assert [c[0] for c in calls] == ["rsync", "tar"]


def test_dry_run_skips_checks(tmp_path: Path) -> None:
    publisher = _publisher(tmp_path, dry_run=True)

    assert publisher.publish("10.2.1") == Ok(None)
    assert not (tmp_path / "target").exists()
