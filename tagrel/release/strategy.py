from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tagrel.release.version import VersionSpec

ReleaseKind = Literal["ga", "prerelease", "patch"]


@dataclass(frozen=True, slots=True)
class ReleaseStrategy:
    """How a version is released.

    release_branch is set for patch releases only; GA and pre-releases are
    cut from trunk.
    """

    kind: ReleaseKind
    release_branch: str | None = None

    @property
    def is_patch(self) -> bool:
        return self.kind == "patch"

    def target_branch(self, trunk: str) -> str:
        return self.release_branch or trunk


def release_branch_name(spec: VersionSpec) -> str:
    return f"release-{spec.minor_line}"


def select(spec: VersionSpec) -> ReleaseStrategy:
    # Numeric comparison: patch 10 must not sort below patch 9.
    if spec.patch > 0:
        return ReleaseStrategy(kind="patch", release_branch=release_branch_name(spec))
    if spec.is_prerelease:
        return ReleaseStrategy(kind="prerelease")
    return ReleaseStrategy(kind="ga")


def assumptions(spec: VersionSpec) -> list[str]:
    """Classification shown to the operator before anything is touched.

    A patch release is also either a pre-release or a GA release, so more
    than one line can apply.
    """
    lines: list[str] = []
    if spec.patch > 0:
        lines.append("This is a patch release.")
    if spec.is_prerelease:
        lines.append("This is a pre-release.")
    else:
        lines.append("This is a GA release.")
    return lines
