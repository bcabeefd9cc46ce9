"""Build tool (sbt) invocations.

Tasks that must run for every Scala version are prefixed with `+` when
`cross_build` is enabled. Extra flags from `SHIPIT_BUILD_FLAGS` go right
after the executable in every call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from shipit.core.config import ReleaseConfig
from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.platform.process import run as run_process
from shipit.services.executor import CommandExecutor

__all__ = ["BuildTool", "VersionError", "parse_version", "strip_ansi"]

_VERSION_TIMEOUT_SECONDS = 10 * 60.0

# CSI sequences (colours, cursor movement) and OSC titles
_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07]*\x07")

_NO_FORMAT_FLAGS = ("-Dsbt.log.noformat=true", "-Dsbt.supershell=false")


def strip_ansi(text: str) -> str:
    """Remove terminal formatting codes."""
    return _ANSI_RE.sub("", text)


def parse_version(output: str) -> str | None:
    """Extract the version from `sbt version` output.

    sbt logs project loading first and prints the value last, e.g.
    `[info] 10.2.1`. The version is the last token of the last non-empty
    line once formatting codes are stripped.
    """
    lines = [ln.strip() for ln in strip_ansi(output).splitlines() if ln.strip()]
    if not lines:
        return None
    token = lines[-1].split()[-1]
    if token.startswith("[") and token.endswith("]"):
        return None
    return token


@dataclass(frozen=True, slots=True)
class VersionError:
    message: str


@dataclass(frozen=True, slots=True)
class BuildTool:
    """sbt adapter bound to one release config."""

    config: ReleaseConfig
    executor: CommandExecutor

    def command(self, *tasks: str, cross: bool = False) -> list[str]:
        """Build an sbt command line for the given tasks."""
        build = self.config.build
        prefix = "+" if cross and build.cross_build else ""
        return [
            build.executable,
            *self.config.extra_build_flags,
            *(f"{prefix}{task}" for task in tasks),
        ]

    def version(self) -> Result[str, ProcessError | VersionError]:
        """Query the project version. Always runs, even in dry-run mode."""
        build = self.config.build
        cmd = [
            build.executable,
            *_NO_FORMAT_FLAGS,
            *self.config.extra_build_flags,
            build.version_task,
        ]
        result = run_process(cmd, cwd=self.config.repo_root, timeout=_VERSION_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result

        version = parse_version(result.value)
        if version is None:
            return Err(VersionError(f"could not read a version from `{' '.join(cmd)}` output"))
        return Ok(version)

    def clean(self) -> Result[None, ProcessError]:
        return self.executor.stream(self.command(self.config.build.clean_task))

    def compat_report(self) -> Result[None, ProcessError]:
        """Binary compatibility report across all cross-build targets."""
        return self.executor.stream(self.command(self.config.build.compat_task, cross=True))

    def publish(self) -> Result[None, ProcessError]:
        """Build, sign and publish artifacts, then generate docs."""
        build = self.config.build
        cmd = self.command(build.publish_task, cross=True)
        if build.docs_task:
            cmd.append(build.docs_task)
        return self.executor.stream(cmd)

    def policy_check(self) -> Result[None, ProcessError]:
        return self.executor.stream(self.command(self.config.build.policy_task))
