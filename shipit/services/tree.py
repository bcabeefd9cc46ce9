"""Working tree guard.

A release must be built from exactly what is committed. The guard refuses
to run with local modifications, then wipes every untracked and ignored file
(`git clean -fxd`) once the operator types `yes`.
"""

from __future__ import annotations

from dataclasses import dataclass

from shipit.core.result import Err, Ok, Result
from shipit.git.repository import Repository
from shipit.output.console import ConsoleProtocol, Style
from shipit.release.errors import ReleaseError

__all__ = ["CONFIRMATION", "WorkingTreeGuard"]

CONFIRMATION = "yes"


@dataclass(frozen=True, slots=True)
class WorkingTreeGuard:
    repo: Repository
    console: ConsoleProtocol
    dry_run: bool = False

    def ensure_committed(self) -> Result[None, ReleaseError]:
        """Fail if git reports any modified or untracked file."""
        match self.repo.status():
            case Err(e):
                error = ReleaseError(kind="precondition", message=f"git status failed: {e.message}")
                self.console.error(error.message)
                return Err(error)
            case Ok(status) if not status.is_clean:
                for entry in status.entries:
                    self.console.print(f"  {entry}", Style.DIM)
                if len(status.untracked) == len(status.entries):
                    hint = "remove the untracked files or add them to .gitignore"
                else:
                    hint = "commit or stash them, then run the release again"
                error = ReleaseError(
                    kind="precondition",
                    message="There are uncommitted changes",
                    hint=hint,
                )
                self.console.error(error.pretty())
                return Err(error)
            case Ok(status):
                self.console.success(f"working tree clean on {status.branch or '(unknown branch)'}")
                return Ok(None)

    def confirm_and_clean(self) -> Result[None, ReleaseError]:
        """Ask before deleting untracked and ignored files, then delete them."""
        self.console.warning(
            "the release runs `git clean -fxd`: every untracked and ignored file "
            f"under {self.repo.path} will be deleted"
        )
        if self.dry_run:
            self.console.print("[dry-run] git clean -fxd", Style.DIM)
            return Ok(None)

        answer = self.console.ask(f"Type '{CONFIRMATION}' to continue:")
        if answer != CONFIRMATION:
            error = ReleaseError(kind="declined", message="not confirmed, bailing out")
            self.console.error(error.message)
            return Err(error)

        result = self.repo.clean_untracked()
        if isinstance(result, Err):
            error = ReleaseError(kind="precondition", message=f"git clean failed: {result.error.message}")
            self.console.error(error.message)
            return Err(error)
        return Ok(None)
