from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tagrel.cli.common import exit_release
from tagrel.core.config import ReleaseSettings, resolve_settings
from tagrel.core.result import Err
from tagrel.git.repository import Repository, find_repo_root
from tagrel.output.console import ConsoleProtocol, RichConsole
from tagrel.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    settings: ReleaseSettings
    console: ConsoleProtocol
    repository: Repository
    dry_run: bool


def build_context(
    *,
    repo: Path | None,
    config: Path | None,
    dry_run: bool,
    verbose: bool,
) -> CLIContext:
    start = repo if repo is not None else Path.cwd()
    repo_root = find_repo_root(start)
    if repo_root is None:
        exit_release(
            ReleaseError(
                kind="git_failed",
                message=f"not inside a git repository: {start}",
                hint="run from the project checkout or pass --repo",
            )
        )

    settings = resolve_settings(repo_root, config)
    if isinstance(settings, Err):
        exit_release(
            ReleaseError(kind="config_invalid", message=settings.error.message)
        )

    console = RichConsole()
    return CLIContext(
        repo_root=repo_root,
        settings=settings.value,
        console=console,
        repository=Repository(repo_root, console=console, dry_run=dry_run, verbose=verbose),
        dry_run=dry_run,
    )
