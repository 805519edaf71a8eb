"""Git gateway used by the release flow.

Usage:
    from tagrel.git import Repository

    repo = Repository(Path("/path/to/repo"), console=console)
    if repo.tag_exists("v1.4.2").unwrap_or(False):
        ...
"""

from tagrel.git.repository import (
    BranchPresence,
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
    find_repo_root,
)

__all__ = [
    "BranchPresence",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repo_root",
]
