"""Git repository abstraction.

The release touches the local repository in four ways: it reads status,
deletes untracked and ignored files, resets to HEAD on rollback, and pushes
to origin. All operations return Result types.

Usage:
    repo = Repository(Path("."))
    match repo.status():
        case Ok(status) if status.is_clean:
            ...
        case Ok(status):
            for entry in status.entries:
                print(entry)
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 60.0
_GIT_PUSH_TIMEOUT_SECONDS = 5 * 60.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repo_root",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "reset --hard")
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single `git status --porcelain` line.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def __str__(self) -> str:
        return f"{self.xy} {self.path}"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed `git status --porcelain=v1 -b`.

    `branch` is empty when the header line is missing and reads
    "HEAD (no branch)" on a detached checkout.
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return not self.entries

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]


def find_repo_root(start: Path) -> Path | None:
    """Top-level directory of the work tree containing `start`, or None."""
    result = run_process(
        ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
        cwd=start,
        timeout=_GIT_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return None
    return Path(result.value.strip())


class Repository:
    """Local git repository the release runs in.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """True if `path` lies inside a git work tree."""
        return isinstance(self._run(["rev-parse", "--show-toplevel"]), Ok)

    def status(self) -> Result[GitStatus, GitError]:
        """Run `git status --porcelain=v1 -b` and parse it."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(self._error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def clean_untracked(self) -> Result[None, GitError]:
        """Delete every untracked and ignored file (`git clean -fxd`)."""
        return self._run_unit(["clean", "-fxd"], "clean -fxd")

    def reset_hard(self) -> Result[None, GitError]:
        """Reset index and working tree to HEAD."""
        return self._run_unit(["reset", "--hard"], "reset --hard")

    def push_tags(self, remote: str = "origin") -> Result[None, GitError]:
        return self._run_unit(["push", remote, "--tags"], f"push {remote} --tags")

    def push_head(self, remote: str = "origin") -> Result[None, GitError]:
        return self._run_unit(["push", remote, "HEAD"], f"push {remote} HEAD")

    def _run_unit(self, args: list[str], command: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(command, result.error))
        return Ok(None)

    def _error(self, command: str, e: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
            returncode=e.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        timeout = _GIT_PUSH_TIMEOUT_SECONDS if args[0] == "push" else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_status(self, output: str) -> GitStatus:
        branch = ""
        entries: list[StatusEntry] = []
        for line in output.splitlines():
            if line.startswith("## "):
                # "## main...origin/main [ahead 1]": keep the local name only
                branch = line[3:].split("...", 1)[0].split(" [", 1)[0].strip()
            elif len(line) > 3 and line[2] == " ":
                entries.append(StatusEntry(xy=line[:2], path=line[3:]))
        return GitStatus(branch=branch, entries=tuple(entries))
