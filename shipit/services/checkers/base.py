# SPDX-License-Identifier: MIT
"""Base types for checkers."""

from dataclasses import dataclass
from enum import Enum, auto


class CheckStatus(Enum):
    """Status of a check result."""

    OK = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        name: What was checked (e.g., "git", "java")
        status: Whether the check passed
        message: Human-readable result message
        hint: Optional fix (install command or URL)
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == CheckStatus.OK

    @classmethod
    def success(cls, name: str, message: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> "CheckResult":
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)
