"""Error types for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "missing_dependency",
    "precondition",
    "declined",
    "invalid_config",
    "step_failed",
    "rolled_back",
    "escalated",
    "interrupted",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    `kind` tells the CLI how the failure was handled; every kind maps to
    exit status 1.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


class ReleaseAborted(Exception):
    """Raised out of a signal handler once recovery has run."""

    def __init__(self, error: ReleaseError) -> None:
        super().__init__(error.message)
        self.error = error


def describe(error: object) -> str:
    """Best one-line description of an error payload."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    detail = getattr(error, "detail", None)
    if isinstance(detail, str) and detail:
        return f"{error} ({detail})"
    return str(error)
