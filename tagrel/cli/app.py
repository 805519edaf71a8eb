from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import typer
from typer.core import TyperCommand

from tagrel import __version__
from tagrel.cli.common import exit_release
from tagrel.cli.context import CLIContext, build_context
from tagrel.core.errors import ErrorCode
from tagrel.core.result import Err
from tagrel.release.confirm import PromptConfirmation
from tagrel.release.inputs import TOKEN_ENV, VERSION_ENV, ReleaseInputs
from tagrel.release.orchestrator import ReleaseOrchestrator
from tagrel.release.packaging import PackagingTool
from tagrel.release.version import CommandValidator, SemverValidator, VersionValidator


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    help="Tag and publish a release: validate, branch, tag, push, package.",
)


class ReleaseCommand(TyperCommand):
    """Reports usage errors with their own exit code.

    Click exits 2 on a bad command line, which is already the code for an
    invalid version string.
    """

    def make_context(
        self,
        info_name: str | None,
        args: list[str],
        parent: click.Context | None = None,
        **extra: Any,
    ) -> click.Context:
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = int(ErrorCode.USAGE_ERROR)
            raise


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def _validator(ctx: CLIContext) -> VersionValidator:
    command = ctx.settings.validator.command
    if command is None:
        return SemverValidator()
    return CommandValidator(
        command, cwd=ctx.repo_root, version_env=ctx.settings.validator.version_env
    )


@app.command(cls=ReleaseCommand)
def release(
    release_version: str | None = typer.Option(
        None,
        "--release-version",
        envvar=VERSION_ENV,
        help="Version to release, e.g. v1.4.2 or v2.0.0-rc.1.",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        envvar=TOKEN_ENV,
        help="Credential handed to the packaging tool.",
        show_default=False,
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository to release (default: the checkout containing the current directory).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Release settings file (default: release.toml at the repository root).",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print git mutations and the packaging call without running them."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Also print read-only git commands."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    inputs = ReleaseInputs.from_values(release_version, token)
    if isinstance(inputs, Err):
        exit_release(inputs.error)

    ctx = build_context(repo=repo, config=config, dry_run=dry_run, verbose=verbose)
    if ctx.dry_run:
        ctx.console.warning("dry run: git mutations and packaging are printed, not executed")

    orchestrator = ReleaseOrchestrator(
        repo=ctx.repository,
        validator=_validator(ctx),
        confirmation=PromptConfirmation(),
        packager=PackagingTool(
            ctx.repo_root, ctx.settings.packaging, console=ctx.console, dry_run=ctx.dry_run
        ),
        console=ctx.console,
        settings=ctx.settings,
        repo_root=ctx.repo_root,
    )
    result = orchestrator.run(inputs.value)
    if isinstance(result, Err):
        exit_release(result.error)


def main() -> None:
    app()
