"""Subprocess execution with Result-based error handling.

Two flavours:
- `run` captures output; used for queries (git status, version, ssh probe).
- `run_streaming` lets output reach the terminal; used for long build and
  upload commands the operator needs to watch.

Neither retries. A command that cannot be started (missing executable,
permission denied) is reported as returncode -1.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from shipit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 if the process never ran or timed out.
        stdout: Captured standard output (empty when streaming).
        stderr: Captured standard error, or the OS error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = self.command[:3]
        suffix = " ..." if len(self.command) > len(shown) else ""
        return f"{' '.join(shown)}{suffix} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """Most useful line of output for an error message."""
        for text in (self.stderr, self.stdout):
            lines = [ln.strip() for ln in text.strip().splitlines() if ln.strip()]
            if lines:
                return lines[-1]
        return ""


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments.
        cwd: Working directory.
        env: Environment (inherits the current one if None).
        timeout: Seconds before the command is killed.

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            cmd, cwd=str(cwd), env=env, capture_output=True, text=True, timeout=timeout, check=False
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(_failure(cmd, -1, partial, f"timed out after {timeout}s"))
    except OSError as e:
        return Err(_failure(cmd, -1, "", str(e)))

    if proc.returncode:
        return Err(_failure(cmd, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output going straight to the terminal.

    Returns:
        Ok(None) on exit 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(_failure(cmd, -1, "", str(e)))

    if proc.returncode:
        return Err(_failure(cmd, proc.returncode, "", ""))
    return Ok(None)


def _failure(cmd: list[str], returncode: int, stdout: str, stderr: str) -> ProcessError:
    return ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
