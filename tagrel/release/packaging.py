from __future__ import annotations

from pathlib import Path

from tagrel.core.config import PackagingConfig
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol
from tagrel.platform.process import merged_env, run_streaming
from tagrel.release.errors import ReleaseError
from tagrel.release.inputs import TOKEN_ENV
from tagrel.release.version import VersionSpec


def release_notes_path(spec: VersionSpec, changelog_dir: str = "changelogs") -> str:
    """Release notes live in one changelog per minor line."""
    return f"{changelog_dir}/CHANGELOG-{spec.minor_line}.md"


class PackagingTool:
    """The external tool that builds and publishes release artifacts.

    Invoked exactly once per release. Its exit code is surfaced as-is; the
    tag it builds from is never rolled back on failure.
    """

    def __init__(
        self,
        repo_root: Path,
        config: PackagingConfig,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> None:
        self.repo_root = repo_root
        self.config = config
        self.dry_run = dry_run
        self._console = console

    def environment(self, *, notes_path: str, token: str) -> dict[str, str]:
        return {
            "RELEASE_NOTES_FILE": notes_path,
            "PUBLISH": "TRUE" if self.config.publish else "FALSE",
            TOKEN_ENV: token,
        }

    def publish(self, *, notes_path: str, token: str) -> Result[None, ReleaseError]:
        overrides = self.environment(notes_path=notes_path, token=token)
        shown = [f"{k}={v}" for k, v in overrides.items() if k != TOKEN_ENV]
        self._console.command([*shown, *self.config.command])
        if self.dry_run:
            return Ok(None)

        result = run_streaming(list(self.config.command), cwd=self.repo_root, env=merged_env(overrides))
        if isinstance(result, Err):
            e = result.error
            if not e.started:
                return Err(
                    ReleaseError(
                        kind="packaging_failed",
                        message=f"cannot start packaging tool: {e.detail or e}",
                        hint="the tag is pushed; fix the tool and run it again by hand",
                    )
                )
            if e.returncode < 0:
                signum = -e.returncode
                return Err(
                    ReleaseError(
                        kind="packaging_failed",
                        message=f"packaging tool killed by signal {signum}",
                        hint="the tag is pushed; packaging can be re-run independently",
                        exit_code=128 + signum,
                    )
                )
            return Err(
                ReleaseError(
                    kind="packaging_failed",
                    message=f"packaging tool exited with status {e.returncode}",
                    hint="the tag is pushed; packaging can be re-run independently",
                    exit_code=e.returncode,
                )
            )
        return Ok(None)
