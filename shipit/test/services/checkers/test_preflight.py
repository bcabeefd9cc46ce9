# SPDX-License-Identifier: MIT
"""Tests for PreflightChecker."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

from shipit.core.config import BuildConfig, ReleaseConfig
from shipit.services.checkers.base import CheckStatus
from shipit.services.checkers.preflight import PreflightChecker


class MockCommandRunner:
    """Mock command runner returning canned (returncode, stdout, stderr)."""

    def __init__(self, responses: dict[tuple[str, ...], tuple[int, str, str]] | None = None):
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def run(
        self, args: list[str], *, capture: bool = True, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append(args)
        key = tuple(args)
        if key in self.responses:
            rc, stdout, stderr = self.responses[key]
            return subprocess.CompletedProcess(args, rc, stdout, stderr)
        raise FileNotFoundError(f"Command not found: {args[0]}")


def _which_all(name: str) -> str:
    return f"/usr/bin/{name}"


def _java(stderr: str) -> MockCommandRunner:
    return MockCommandRunner({("java", "-version"): (0, "", stderr)})


def _checker(tmp_path: Path, runner: MockCommandRunner, **overrides: object) -> PreflightChecker:
    config = ReleaseConfig(repo_root=tmp_path, **overrides)  # type: ignore[arg-type]
    return PreflightChecker(config=config, runner=runner)


class TestCheckTool:
    def test_found(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, MockCommandRunner())
        with patch("shutil.which", return_value="/usr/bin/rsync"):
            result = checker.check_tool("rsync")

        assert result.status == CheckStatus.OK
        assert result.message == "/usr/bin/rsync"

    def test_missing_has_hint(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, MockCommandRunner())
        with patch("shutil.which", return_value=None):
            result = checker.check_tool("rsync")

        assert not result.ok
        assert result.message == "missing"
        assert result.hint is not None and "rsync" in result.hint


class TestCheckJava:
    def test_modern_version_ok(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java('openjdk version "17.0.8" 2023-07-18'))
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert result.ok
        assert result.message == "version 17"

    def test_legacy_scheme_ok(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java('java version "1.8.0_292"'))
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert result.ok

    def test_too_old(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java('java version "1.7.0_80"'))
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert not result.ok
        assert "7 found, 8+ required" in result.message

    def test_minimum_from_config(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java('openjdk version "11.0.2"'), min_java_major=17)
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert not result.ok

    def test_missing(self, tmp_path: Path) -> None:
        runner = MockCommandRunner()
        checker = _checker(tmp_path, runner)
        with patch("shutil.which", return_value=None):
            result = checker.check_java()

        assert not result.ok
        assert runner.calls == []

    def test_unrecognized_output(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java("Error: could not create the VM"))
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert not result.ok
        assert "unrecognized" in result.message

    def test_cannot_run(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, MockCommandRunner())
        with patch("shutil.which", side_effect=_which_all):
            result = checker.check_java()

        assert not result.ok
        assert "cannot run" in result.message


class TestCheckAll:
    def test_checks_every_tool(self, tmp_path: Path) -> None:
        checker = _checker(
            tmp_path,
            _java('openjdk version "17.0.8"'),
            build=BuildConfig(executable="./sbtx"),
        )
        with patch("shutil.which", side_effect=_which_all):
            results = checker.check_all()

        assert [r.name for r in results] == ["git", "rsync", "tar", "ssh", "./sbtx", "java"]
        assert all(r.ok for r in results)

    def test_reports_all_missing_tools(self, tmp_path: Path) -> None:
        checker = _checker(tmp_path, _java('openjdk version "17.0.8"'))

        def which(name: str) -> str | None:
            return None if name in {"rsync", "sbt"} else f"/usr/bin/{name}"

        with patch("shutil.which", side_effect=which):
            results = checker.check_all()

        assert sorted(r.name for r in results if not r.ok) == ["rsync", "sbt"]
