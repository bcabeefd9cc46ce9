"""Git operations on the repository being released.

Usage:
    from shipit.git import Repository

    repo = Repository(Path("."))
    status = repo.status()
"""

from shipit.git.repository import (
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
    find_repo_root,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repo_root",
]
