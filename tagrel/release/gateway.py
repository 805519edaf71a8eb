from __future__ import annotations

from typing import Protocol

from tagrel.core.result import Result
from tagrel.git.repository import BranchPresence, GitError, GitStatus
from tagrel.release.errors import ReleaseError


class RepositoryGateway(Protocol):
    """The git surface the release flow drives.

    tagrel.git.Repository is the production implementation.
    """

    def status(self) -> Result[GitStatus, GitError]: ...

    def fetch(self, remote: str) -> Result[None, GitError]: ...

    def branch_presence(self, name: str, remote: str) -> Result[BranchPresence, GitError]: ...

    def checkout(self, ref: str) -> Result[None, GitError]: ...

    def create_branch(self, name: str, *, start: str | None = None) -> Result[None, GitError]: ...

    def tag_exists(self, tag: str) -> Result[bool, GitError]: ...

    def create_tag(self, tag: str) -> Result[None, GitError]: ...

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]: ...

    def push_tag(self, remote: str, tag: str) -> Result[None, GitError]: ...


class Packager(Protocol):
    """The packaging tool, invoked once after the tag is pushed.

    tagrel.release.packaging.PackagingTool is the production implementation.
    """

    def publish(self, *, notes_path: str, token: str) -> Result[None, ReleaseError]: ...
