"""Streaming command execution with dry-run support.

Mutating release commands (build, publish, upload, remote commit) all go
through `CommandExecutor.stream` so `--dry-run` can print them instead.
Read-only queries call `shipit.platform.process.run` directly.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from shipit.core.result import Ok, Result
from shipit.output.console import ConsoleProtocol, Style
from shipit.platform.process import ProcessError, run_streaming

__all__ = ["CommandExecutor"]


@dataclass(frozen=True, slots=True)
class CommandExecutor:
    """Echo and run commands in the repository root.

    Attributes:
        cwd: Working directory for every command
        console: Where the echoed command line goes
        dry_run: Print commands without running them
    """

    cwd: Path
    console: ConsoleProtocol
    dry_run: bool = False

    def stream(self, cmd: list[str]) -> Result[None, ProcessError]:
        line = shlex.join(cmd)
        if self.dry_run:
            self.console.print(f"[dry-run] {line}", Style.DIM)
            return Ok(None)
        self.console.print(f"$ {line}", Style.DIM)
        return run_streaming(cmd, cwd=self.cwd)
