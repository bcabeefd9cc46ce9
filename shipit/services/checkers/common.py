# SPDX-License-Identifier: MIT
"""Common utilities for checkers.

- CommandRunner protocol so version probes can be faked in tests
- Parsing helpers for tool version output
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Protocol

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "INSTALL_HINTS",
    "first_line",
    "parse_java_major",
]


class CommandRunner(Protocol):
    """Protocol for running version probe commands."""

    def run(
        self, args: list[str], *, capture: bool = True, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        """Run a command and return the completed process."""
        ...


class DefaultCommandRunner:
    """Command runner using subprocess.run."""

    def run(
        self, args: list[str], *, capture: bool = True, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            args,
            capture_output=capture,
            text=True,
            check=False,
            cwd=cwd,
        )


INSTALL_HINTS: dict[str, str] = {
    "git": "https://git-scm.com/downloads",
    "sbt": "https://www.scala-sbt.org/download.html",
    "rsync": "install rsync with your package manager (e.g. apt install rsync)",
    "tar": "install tar with your package manager",
    "ssh": "install an OpenSSH client (e.g. apt install openssh-client)",
    "java": "https://adoptium.net/",
}


def first_line(text: str) -> str:
    """Extract the first non-empty line from text."""
    for line in text.strip().splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


_JAVA_VERSION_RE = re.compile(r'version\s+"(\d+)(?:\.(\d+))?')


def parse_java_major(text: str) -> int | None:
    """Parse the major version from `java -version` output.

    Handles both the legacy scheme (`"1.8.0_292"` -> 8) and the current one
    (`"17.0.8"` -> 17, `"21"` -> 21). Returns None if nothing matches.
    """
    match = _JAVA_VERSION_RE.search(text)
    if not match:
        return None
    major = int(match.group(1))
    if major == 1 and match.group(2) is not None:
        return int(match.group(2))
    return major
