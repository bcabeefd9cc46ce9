# SPDX-License-Identifier: MIT
"""Preflight checker.

Validates that everything the release shells out to is installed:
- git, rsync, tar, ssh (PATH)
- the configured build tool executable (PATH)
- java, at or above the configured major version
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field

from shipit.core.config import ReleaseConfig
from shipit.services.checkers.base import CheckResult
from shipit.services.checkers.common import (
    INSTALL_HINTS,
    CommandRunner,
    DefaultCommandRunner,
    first_line,
    parse_java_major,
)

REQUIRED_TOOLS: tuple[str, ...] = ("git", "rsync", "tar", "ssh")


@dataclass(frozen=True, slots=True)
class PreflightChecker:
    """Check release prerequisites.

    Attributes:
        config: Release configuration (build tool executable, java minimum)
        runner: Command runner for version probes
    """

    config: ReleaseConfig
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)

    def check_all(self) -> list[CheckResult]:
        """Run every check; never stops at the first failure."""
        results = [self.check_tool(name) for name in REQUIRED_TOOLS]
        results.append(self.check_tool(self.config.build.executable))
        results.append(self.check_java())
        return results

    def check_tool(self, name: str) -> CheckResult:
        """Check an executable is available in PATH."""
        path = shutil.which(name)
        if not path:
            return CheckResult.error(name, "missing", hint=INSTALL_HINTS.get(name))
        return CheckResult.success(name, path)

    def check_java(self) -> CheckResult:
        """Check java is installed with a recent enough major version."""
        minimum = self.config.min_java_major
        if not shutil.which("java"):
            return CheckResult.error("java", "missing", hint=INSTALL_HINTS["java"])

        try:
            proc = self.runner.run(["java", "-version"])
        except OSError as e:
            return CheckResult.error("java", f"cannot run: {e}", hint=INSTALL_HINTS["java"])

        # java prints its version banner on stderr
        output = f"{proc.stderr or ''}\n{proc.stdout or ''}"
        major = parse_java_major(output)
        if major is None:
            return CheckResult.error(
                "java",
                f"unrecognized version output: {first_line(output) or '(empty)'}",
            )
        if major < minimum:
            return CheckResult.error(
                "java",
                f"version {major} found, {minimum}+ required",
                hint=INSTALL_HINTS["java"],
            )
        return CheckResult.success("java", f"version {major}")
