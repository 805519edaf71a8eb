"""Shared fakes for release flow tests."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from tagrel.core.result import Err, Ok, Result
from tagrel.git.repository import BranchPresence, GitError, GitStatus, StatusEntry
from tagrel.release.errors import ReleaseError

MUTATING_CALLS = frozenset(
    {"fetch", "checkout", "create_branch", "create_tag", "push_branch", "push_tag"}
)


@dataclass
class FakeRepository:
    """In-memory RepositoryGateway recording every call."""

    dirty: list[StatusEntry] = field(default_factory=list)
    local_branches: set[str] = field(default_factory=set)
    remote_branches: set[str] = field(default_factory=set)
    tags: set[str] = field(default_factory=set)
    remote_tags: set[str] = field(default_factory=set)
    fail: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    head: str = "main"

    def _failed(self, name: str) -> Err[GitError] | None:
        if name in self.fail:
            return Err(GitError(command=name, message=f"{name} failed"))
        return None

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def status(self) -> Result[GitStatus, GitError]:
        self.calls.append(("status",))
        return self._failed("status") or Ok(GitStatus(branch=self.head, entries=tuple(self.dirty)))

    def fetch(self, remote: str) -> Result[None, GitError]:
        self.calls.append(("fetch", remote))
        failed = self._failed("fetch")
        if failed:
            return failed
        self.tags |= self.remote_tags
        return Ok(None)

    def branch_presence(self, name: str, remote: str) -> Result[BranchPresence, GitError]:
        self.calls.append(("branch_presence", name, remote))
        return self._failed("branch_presence") or Ok(
            BranchPresence(local=name in self.local_branches, remote=name in self.remote_branches)
        )

    def checkout(self, ref: str) -> Result[None, GitError]:
        self.calls.append(("checkout", ref))
        failed = self._failed("checkout")
        if failed:
            return failed
        self.head = ref
        return Ok(None)

    def create_branch(self, name: str, *, start: str | None = None) -> Result[None, GitError]:
        self.calls.append(("create_branch", name, start or ""))
        failed = self._failed("create_branch")
        if failed:
            return failed
        if name in self.local_branches:
            return Err(GitError(command="checkout -b", message=f"branch '{name}' already exists"))
        self.local_branches.add(name)
        self.head = name
        return Ok(None)

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        self.calls.append(("tag_exists", tag))
        return self._failed("tag_exists") or Ok(tag in self.tags)

    def create_tag(self, tag: str) -> Result[None, GitError]:
        self.calls.append(("create_tag", tag))
        failed = self._failed("create_tag")
        if failed:
            return failed
        self.tags.add(tag)
        return Ok(None)

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]:
        self.calls.append(("push_branch", remote, branch))
        failed = self._failed("push_branch")
        if failed:
            return failed
        self.remote_branches.add(branch)
        return Ok(None)

    def push_tag(self, remote: str, tag: str) -> Result[None, GitError]:
        self.calls.append(("push_tag", remote, tag))
        failed = self._failed("push_tag")
        if failed:
            return failed
        self.remote_tags.add(tag)
        return Ok(None)


@dataclass
class FakePackager:
    """Records publish calls; fails with exit_code when set."""

    exit_code: int | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)

    def publish(self, *, notes_path: str, token: str) -> Result[None, ReleaseError]:
        self.calls.append((notes_path, token))
        if self.exit_code is not None:
            return Err(
                ReleaseError(
                    kind="packaging_failed",
                    message=f"packaging tool exited with status {self.exit_code}",
                    exit_code=self.exit_code,
                )
            )
        return Ok(None)


@pytest.fixture
def fake_repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def fake_packager() -> FakePackager:
    return FakePackager()
