"""Failure recovery for the release flow.

The coordinator owns a phase token that only moves forward:

    PRE_PUSH  --enter_post_push()-->  POST_PUSH

PRE_PUSH failures of TRY steps roll the working tree back (`git reset
--hard`, `git clean -fxd`) and bail out. IMPORTANT steps, and every failure
once POST_PUSH is reached, leave all state alone and raise an escalated
alert instead, since artifacts or commits may already be out.

Signals (SIGINT, SIGHUP, SIGTERM) go through the same dispatch as step
failures while `trap_signals()` is active. The handlers themselves only raise
`SignalInterrupt`: recovery starts once that has unwound out of the running
step, by which point `subprocess.run` has killed and reaped the child.
Further signals are ignored from then on. Recovery runs at most once.
"""

from __future__ import annotations

import signal
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from enum import Enum, auto
from types import FrameType
from typing import Protocol, TypeVar

from shipit.core.result import Err, Ok, Result
from shipit.git.repository import GitError
from shipit.output.console import ConsoleProtocol, Style
from shipit.release.errors import ReleaseAborted, ReleaseError, describe

__all__ = [
    "FailurePolicy",
    "RecoveryCoordinator",
    "RecoveryPhase",
    "RollbackTarget",
    "SignalInterrupt",
    "TRAPPED_SIGNALS",
]

T = TypeVar("T")
E = TypeVar("E")


class RecoveryPhase(Enum):
    PRE_PUSH = auto()
    POST_PUSH = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


class FailurePolicy(Enum):
    """How a failing step is handled."""

    TRY = auto()
    """Roll back the working tree (PRE_PUSH only)."""

    IMPORTANT = auto()
    """Never roll back; escalate."""


class RollbackTarget(Protocol):
    """What rollback needs from the repository."""

    def reset_hard(self) -> Result[None, GitError]: ...

    def clean_untracked(self) -> Result[None, GitError]: ...


def _trapped_signals() -> tuple[signal.Signals, ...]:
    names = ("SIGINT", "SIGHUP", "SIGTERM")
    return tuple(getattr(signal, n) for n in names if hasattr(signal, n))


TRAPPED_SIGNALS = _trapped_signals()


class SignalInterrupt(BaseException):
    """Raised from a trapped signal handler.

    A BaseException, like KeyboardInterrupt, so it passes through
    `subprocess.run` (which kills and waits for the child on the way out) and
    any `except Exception` along the way.
    """

    def __init__(self, signum: int) -> None:
        super().__init__(signum)
        self.signum = signum

    @property
    def name(self) -> str:
        return signal.Signals(self.signum).name


@contextmanager
def _installed(
    handler: Callable[[int, FrameType | None], None] | signal.Handlers,
) -> Iterator[None]:
    """Install `handler` for every trapped signal, restoring the old ones on exit."""
    previous = {sig: signal.signal(sig, handler) for sig in TRAPPED_SIGNALS}
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old if old is not None else signal.SIG_DFL)


class RecoveryCoordinator:
    """Phase-aware failure handling.

    Attributes:
        phase: Current recovery phase
        recovered: True once rollback or escalation has run
    """

    def __init__(self, repo: RollbackTarget, console: ConsoleProtocol) -> None:
        self._repo = repo
        self._console = console
        self.phase = RecoveryPhase.PRE_PUSH
        self.recovered = False
        self.interrupted_by: int | None = None

    def enter_post_push(self) -> None:
        """Switch to POST_PUSH. Calling it again is a no-op."""
        if self.phase is RecoveryPhase.POST_PUSH:
            return
        self.phase = RecoveryPhase.POST_PUSH
        self._console.print("entering post-push phase: failures will no longer roll back", Style.DIM)

    def rolls_back(self, policy: FailurePolicy) -> bool:
        return self.phase is RecoveryPhase.PRE_PUSH and policy is FailurePolicy.TRY

    def guard(
        self,
        step: str,
        operation: Callable[[], Result[T, E]],
        policy: FailurePolicy,
    ) -> Result[T, ReleaseError]:
        """Run one step and apply the recovery strategy if it fails.

        Returns:
            Ok(value) on success. On failure, Err with kind "rolled_back" or
            "escalated" after recovery has already run.
        """
        match operation():
            case Ok(value):
                return Ok(value)
            case Err(error):
                reason = f"{step} failed: {describe(error)}"
                if self.rolls_back(policy):
                    return Err(self.rollback(reason))
                return Err(self.escalate(reason))

    def fail(self, step: str, message: str, policy: FailurePolicy) -> ReleaseError:
        """Apply recovery for a failure detected outside `guard`."""
        reason = f"{step}: {message}"
        if self.rolls_back(policy):
            return self.rollback(reason)
        return self.escalate(reason)

    def rollback(self, reason: str) -> ReleaseError:
        """Restore the working tree to the last commit, then bail out."""
        self._console.error(reason)
        if self.recovered:
            return ReleaseError(kind="rolled_back", message=reason)
        self.recovered = True

        self._console.warning("rolling back: git reset --hard && git clean -fxd")
        # git children inherit SIG_IGN, so a second Ctrl-C cannot cut them short
        with _installed(signal.SIG_IGN):
            results = (self._repo.reset_hard(), self._repo.clean_untracked())
        for result in results:
            if isinstance(result, Err):
                self._console.alert(
                    "ARRGH: rollback failed",
                    [
                        reason,
                        f"git {result.error.command}: {result.error.message}",
                        "The working tree may be in an inconsistent state.",
                        "Inspect it manually before trying again.",
                    ],
                )
                return ReleaseError(kind="escalated", message=reason, hint="rollback failed")

        self._console.error("bailing out")
        return ReleaseError(kind="rolled_back", message=reason)

    def escalate(self, reason: str) -> ReleaseError:
        """Alert loudly without touching local or remote state."""
        if self.recovered:
            self._console.error(reason)
            return ReleaseError(kind="escalated", message=reason)
        self.recovered = True

        self._console.alert(
            "ARRGH: release failed",
            [
                reason,
                f"Phase: {self.phase}. Artifacts, tags or docs may be partially published.",
                "Nothing was rolled back. Inspect the local repository, origin and the",
                "release server manually before retrying.",
            ],
        )
        return ReleaseError(kind="escalated", message=reason, hint="manual inspection required")

    def handle_signal(self, signum: int) -> ReleaseError:
        """Run phase-appropriate recovery for an interrupting signal."""
        name = signal.Signals(signum).name
        reason = f"interrupted by {name}"
        if self.recovered:
            return ReleaseError(kind="interrupted", message=reason)
        if self.phase is RecoveryPhase.PRE_PUSH:
            error = self.rollback(reason)
        else:
            error = self.escalate(reason)
        return ReleaseError(kind="interrupted", message=error.message, hint=error.hint)

    @contextmanager
    def trap_signals(self) -> Iterator[None]:
        """Route termination signals to recovery for the duration of the block.

        Previous handlers are restored on exit.

        Raises:
            ReleaseAborted: A signal arrived; recovery has already run.
        """
        with self._raising_on_signals():
            try:
                yield
            except SignalInterrupt as interrupt:
                raise ReleaseAborted(self.handle_signal(interrupt.signum)) from None

    @contextmanager
    def abort_on_signals(self) -> Iterator[None]:
        """Turn termination signals into a plain bail-out, with no recovery.

        Covers preflight and the confirmation prompt, where nothing in the
        working tree has been touched yet.

        Raises:
            ReleaseAborted: A signal arrived.
        """
        with self._raising_on_signals():
            try:
                yield
            except SignalInterrupt as interrupt:
                reason = f"interrupted by {interrupt.name}"
                self._console.error(f"{reason}, bailing out")
                raise ReleaseAborted(ReleaseError(kind="interrupted", message=reason)) from None

    def _raising_on_signals(self) -> AbstractContextManager[None]:
        def _handler(signum: int, _frame: FrameType | None) -> None:
            # only the first signal unwinds; later ones would cut recovery short
            if self.interrupted_by is not None:
                return
            self.interrupted_by = signum
            raise SignalInterrupt(signum)

        return _installed(_handler)
