"""Git repository gateway.

Repository wraps the handful of git commands a release needs: status,
fetch, branch lookup/creation/checkout, tag lookup/creation and push.
Every method returns a Result; nothing here raises on git failure.

Mutating commands are echoed to the console before they run. In dry-run
mode they are only echoed, and reported as successful.

Usage:
    repo = Repository(Path("/path/to/repo"), console=console)

    match repo.status():
        case Ok(status) if status.is_clean:
            ...
        case Ok(status):
            print(f"{len(status.entries)} dirty paths")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol
from tagrel.platform.process import ProcessError
from tagrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "BranchPresence",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "find_repo_root",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed `git status --porcelain=v1 -b`.

    Attributes:
        branch: Current branch name ("HEAD (no branch)" when detached)
        entries: Staged, unstaged and untracked entries
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if the working tree has no changes, untracked files included."""
        return len(self.entries) == 0


@dataclass(frozen=True, slots=True)
class BranchPresence:
    """Where a branch exists after a fetch."""

    local: bool
    remote: bool


class Repository:
    """Git repository gateway.

    Attributes:
        path: Path to the repository root
        dry_run: Echo mutating commands without running them
        verbose: Also echo read-only commands
    """

    def __init__(
        self,
        path: Path,
        *,
        console: ConsoleProtocol | None = None,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> None:
        self.path = path
        self.dry_run = dry_run
        self.verbose = verbose
        self._console = console

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def status(self) -> Result[GitStatus, GitError]:
        """Get working tree status."""
        result = self._query(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(_parse_status(stdout))

    def branch_presence(self, name: str, remote: str) -> Result[BranchPresence, GitError]:
        """Check whether a branch exists locally and on the remote.

        Remote presence is read from remote-tracking refs, so it reflects the
        last fetch.
        """
        local = self._query(["branch", "--list", name])
        if isinstance(local, Err):
            return Err(_git_error("branch --list", local.error, "cannot list branches"))

        tracking = self._query(["branch", "--remotes", "--list", f"{remote}/{name}"])
        if isinstance(tracking, Err):
            return Err(_git_error("branch --remotes", tracking.error, "cannot list branches"))

        return Ok(
            BranchPresence(local=bool(local.value.strip()), remote=bool(tracking.value.strip()))
        )

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        result = self._query(["tag", "--list", tag])
        if isinstance(result, Err):
            return Err(_git_error("tag --list", result.error, "cannot list tags"))
        return Ok(any(line.strip() == tag for line in result.value.splitlines()))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def fetch(self, remote: str) -> Result[None, GitError]:
        """Fetch all branches and tags from a remote."""
        return self._mutate(["fetch", remote, "--tags"], fallback="fetch failed")

    def checkout(self, ref: str) -> Result[None, GitError]:
        return self._mutate(["checkout", ref], fallback=f"cannot check out {ref}")

    def create_branch(self, name: str, *, start: str | None = None) -> Result[None, GitError]:
        """Create a branch and check it out.

        Starts from the current position unless start is given (a
        remote-tracking ref, which makes the new branch track it).
        """
        args = ["checkout", "-b", name]
        if start is not None:
            args += ["--track", start]
        return self._mutate(args, fallback=f"cannot create branch {name}")

    def create_tag(self, tag: str) -> Result[None, GitError]:
        """Create a lightweight tag at HEAD."""
        return self._mutate(["tag", tag], fallback=f"cannot create tag {tag}")

    def push_branch(self, remote: str, branch: str) -> Result[None, GitError]:
        """Push a branch and set its upstream."""
        return self._mutate(
            ["push", "--set-upstream", remote, branch], fallback=f"push of {branch} rejected"
        )

    def push_tag(self, remote: str, tag: str) -> Result[None, GitError]:
        return self._mutate(["push", remote, f"refs/tags/{tag}"], fallback=f"push of {tag} rejected")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _query(self, args: list[str]) -> Result[str, ProcessError]:
        if self.verbose and self._console is not None:
            self._console.command(["git", *args])
        return self._run(args)

    def _mutate(self, args: list[str], *, fallback: str) -> Result[None, GitError]:
        if self._console is not None:
            self._console.command(["git", *args])
        if self.dry_run:
            return Ok(None)

        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error(" ".join(args[:2]), result.error, fallback))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(command=command, message=error.detail or fallback, returncode=error.returncode)


def _parse_status(output: str) -> GitStatus:
    """Parse git status --porcelain=v1 -b output."""
    lines = [ln for ln in output.splitlines() if ln.strip()]
    if not lines:
        return GitStatus(branch="")

    branch = ""
    if lines[0].startswith("##"):
        # ## branch...upstream [ahead N, behind M]
        head = lines[0][2:].strip().split(" [", 1)[0]
        branch = head.split("...", 1)[0].strip()
        lines = lines[1:]

    entries: list[StatusEntry] = []
    for line in lines:
        if len(line) < 4:
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))

    return GitStatus(branch=branch, entries=tuple(entries))


def find_repo_root(start: Path) -> Path | None:
    """Walk up from start to the nearest directory containing .git."""
    start = start.expanduser().resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None
