"""Tests for tagrel.git.repository."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagrel.core.result import Err, Ok, Result
from tagrel.git import repository as repo_mod
from tagrel.git.repository import BranchPresence, GitStatus, Repository, StatusEntry, find_repo_root
from tagrel.output.console import MockConsole
from tagrel.platform.process import ProcessError


class FakeGit:
    """Replaces run_process; answers by git subcommand."""

    def __init__(self, responses: dict[str, Result[str, ProcessError]] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []

    def __call__(
        self, cmd: list[str], cwd: Path, env: dict[str, str] | None = None, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, env
        args = cmd[3:]  # strip "git -C <path>"
        self.calls.append(args)
        self.timeouts.append(timeout)
        return self.responses.get(" ".join(args), Ok(""))


def _fail(stderr: str) -> Err[ProcessError]:
    return Err(ProcessError(("git",), 1, "", stderr))


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    git = FakeGit()
    monkeypatch.setattr(repo_mod, "run_process", git)
    return git


class TestStatus:
    def test_clean(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["status --porcelain=v1 -b"] = Ok("## main...upstream/main\n")

        result = Repository(tmp_path).status()

        assert result == Ok(GitStatus(branch="main"))
        assert isinstance(result, Ok) and result.value.is_clean

    def test_dirty(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["status --porcelain=v1 -b"] = Ok(
            "## main...upstream/main [ahead 1]\n M pkg/cmd.go\n?? notes.txt\n"
        )

        result = Repository(tmp_path).status()

        assert isinstance(result, Ok)
        assert result.value.branch == "main"
        assert result.value.entries == (
            StatusEntry(xy=" M", path="pkg/cmd.go"),
            StatusEntry(xy="??", path="notes.txt"),
        )
        assert result.value.is_clean is False

    def test_error(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["status --porcelain=v1 -b"] = _fail("fatal: not a git repository")

        result = Repository(tmp_path).status()

        assert isinstance(result, Err)
        assert result.error.message == "fatal: not a git repository"


class TestQueries:
    def test_branch_presence(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["branch --remotes --list upstream/release-1.4"] = Ok(
            "  upstream/release-1.4\n"
        )

        result = Repository(tmp_path).branch_presence("release-1.4", "upstream")

        assert result == Ok(BranchPresence(local=False, remote=True))
        assert isinstance(result, Ok)

    def test_branch_presence_current_branch(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["branch --list release-1.4"] = Ok("* release-1.4\n")

        result = Repository(tmp_path).branch_presence("release-1.4", "upstream")

        assert result == Ok(BranchPresence(local=True, remote=False))

    def test_tag_exists_matches_exact_name(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["tag --list v1.4.2"] = Ok("v1.4.2\n")
        repo = Repository(tmp_path)

        assert repo.tag_exists("v1.4.2") == Ok(True)
        assert repo.tag_exists("v1.4.3") == Ok(False)

    def test_queries_are_not_echoed_unless_verbose(self, fake_git: FakeGit, tmp_path: Path) -> None:
        console = MockConsole()
        Repository(tmp_path, console=console).tag_exists("v1.0.0")
        assert console.commands == []

        Repository(tmp_path, console=console, verbose=True).tag_exists("v1.0.0")
        assert console.commands == ["git tag --list v1.0.0"]


class TestMutations:
    def test_commands(self, fake_git: FakeGit, tmp_path: Path) -> None:
        repo = Repository(tmp_path)

        assert repo.fetch("upstream") == Ok(None)
        assert repo.checkout("upstream/main") == Ok(None)
        assert repo.create_branch("release-1.4") == Ok(None)
        assert repo.create_branch("release-1.5", start="upstream/release-1.5") == Ok(None)
        assert repo.push_branch("upstream", "release-1.4") == Ok(None)
        assert repo.create_tag("v1.4.2") == Ok(None)
        assert repo.push_tag("upstream", "v1.4.2") == Ok(None)

        assert fake_git.calls == [
            ["fetch", "upstream", "--tags"],
            ["checkout", "upstream/main"],
            ["checkout", "-b", "release-1.4"],
            ["checkout", "-b", "release-1.5", "--track", "upstream/release-1.5"],
            ["push", "--set-upstream", "upstream", "release-1.4"],
            ["tag", "v1.4.2"],
            ["push", "upstream", "refs/tags/v1.4.2"],
        ]

    def test_network_commands_get_longer_timeout(self, fake_git: FakeGit, tmp_path: Path) -> None:
        repo = Repository(tmp_path)
        repo.create_tag("v1.0.0")
        repo.push_tag("upstream", "v1.0.0")

        local, network = fake_git.timeouts
        assert local is not None and network is not None
        assert network > local

    def test_failure_carries_git_message(self, fake_git: FakeGit, tmp_path: Path) -> None:
        fake_git.responses["push upstream refs/tags/v1.0.0"] = _fail(
            "! [rejected] v1.0.0 -> v1.0.0 (already exists)"
        )

        result = Repository(tmp_path).push_tag("upstream", "v1.0.0")

        assert isinstance(result, Err)
        assert "already exists" in result.error.message
        assert result.error.command == "push upstream"

    def test_dry_run_echoes_without_running(self, fake_git: FakeGit, tmp_path: Path) -> None:
        console = MockConsole()
        repo = Repository(tmp_path, console=console, dry_run=True)

        assert repo.create_tag("v1.0.0") == Ok(None)
        assert repo.push_tag("upstream", "v1.0.0") == Ok(None)

        assert fake_git.calls == []
        assert console.commands == ["git tag v1.0.0", "git push upstream refs/tags/v1.0.0"]


def test_find_repo_root(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "pkg" / "cmd"
    nested.mkdir(parents=True)

    assert find_repo_root(nested) == tmp_path.resolve()


def test_find_repo_root_outside_repo(tmp_path: Path) -> None:
    assert find_repo_root(tmp_path) != tmp_path.resolve()
