"""Version specs and the validators that produce them.

A validator is consulted twice, the way the release tooling always has:
once in verify-only mode to reject malformed strings, then in
emit-components mode to obtain major/minor/patch/prerelease.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tagrel.core.result import Err, Ok, Result
from tagrel.platform.process import merged_env
from tagrel.platform.process import run as run_process
from tagrel.release.errors import ReleaseError

_VALIDATOR_TIMEOUT_SECONDS = 2 * 60.0

_VERSION_RE = re.compile(
    r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?$"
)

_EXPECTED_FORMAT = "v<major>.<minor>.<patch>[-<prerelease>], e.g. v1.4.2 or v2.0.0-rc.1"


@dataclass(frozen=True, slots=True)
class VersionSpec:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def tag(self) -> str:
        """Canonical tag name, the only one derivable from this spec."""
        base = f"v{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{self.prerelease}"
        return base

    @property
    def minor_line(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


class VersionValidator(Protocol):
    def verify(self, version: str) -> Result[None, ReleaseError]:
        """Accept or reject a version string without producing components."""
        ...

    def components(self, version: str) -> Result[VersionSpec, ReleaseError]:
        """Break an accepted version string into its components."""
        ...


def _invalid(version: str, detail: str | None = None) -> ReleaseError:
    return ReleaseError(
        kind="invalid_version_format",
        message=f"invalid version string: {version!r}" + (f" ({detail})" if detail else ""),
        hint=f"expected {_EXPECTED_FORMAT}",
    )


class SemverValidator:
    """Built-in validator for `v`-prefixed semantic versions.

    Build metadata (`+...`) is not accepted: it cannot be part of a tag name
    that sorts and compares predictably.
    """

    def verify(self, version: str) -> Result[None, ReleaseError]:
        if _VERSION_RE.match(version) is None:
            return Err(_invalid(version))
        return Ok(None)

    def components(self, version: str) -> Result[VersionSpec, ReleaseError]:
        m = _VERSION_RE.match(version)
        if m is None:
            return Err(_invalid(version))
        return Ok(
            VersionSpec(
                major=int(m.group(1)),
                minor=int(m.group(2)),
                patch=int(m.group(3)),
                prerelease=m.group(4) or None,
            )
        )


class CommandValidator:
    """Validator backed by an external command.

    The version is passed in the environment variable named by version_env
    (RELEASE_VERSION unless configured otherwise).
    `<command> --verify` signals rejection with a non-zero exit; `<command>`
    alone prints assignable KEY=value lines whose keys end in MAJOR, MINOR,
    PATCH and PRERELEASE (any prefix such as `PROJECT_` is ignored).
    """

    def __init__(
        self, command: tuple[str, ...], *, cwd: Path, version_env: str = "RELEASE_VERSION"
    ) -> None:
        self.command = command
        self.cwd = cwd
        self.version_env = version_env

    def verify(self, version: str) -> Result[None, ReleaseError]:
        result = self._run(version, ["--verify"])
        if isinstance(result, Err):
            return Err(_invalid(version, result.error.detail or None))
        return Ok(None)

    def components(self, version: str) -> Result[VersionSpec, ReleaseError]:
        result = self._run(version, [])
        if isinstance(result, Err):
            return Err(_invalid(version, result.error.detail or None))
        return parse_components(version, result.value)

    def _run(self, version: str, extra: list[str]):
        return run_process(
            [*self.command, *extra],
            cwd=self.cwd,
            env=merged_env({self.version_env: version}),
            timeout=_VALIDATOR_TIMEOUT_SECONDS,
        )


def parse_components(version: str, output: str) -> Result[VersionSpec, ReleaseError]:
    """Parse KEY=value lines emitted by an external validator."""
    values: dict[str, str] = {}
    for raw in output.splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        field = key.strip().upper().rsplit("_", 1)[-1]
        if field in {"MAJOR", "MINOR", "PATCH", "PRERELEASE"}:
            values[field] = value.strip().strip("'\"")

    numbers: dict[str, int] = {}
    for name in ("MAJOR", "MINOR", "PATCH"):
        text = values.get(name)
        if text is None:
            return Err(_invalid(version, f"validator did not emit {name}"))
        if not (text.isascii() and text.isdigit()):
            return Err(_invalid(version, f"{name} is not a non-negative integer: {text!r}"))
        numbers[name] = int(text)

    return Ok(
        VersionSpec(
            major=numbers["MAJOR"],
            minor=numbers["MINOR"],
            patch=numbers["PATCH"],
            prerelease=values.get("PRERELEASE") or None,
        )
    )
