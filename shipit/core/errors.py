"""Process exit codes.

A release either completes or it does not: every failure class (missing tool,
dirty tree, declined confirmation, failed command, signal) exits with 1 so
that wrapping CI jobs only need to check for non-zero.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the shipit command."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()
