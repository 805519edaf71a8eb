"""Error payload for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "missing_input",
    "invalid_version_format",
    "dirty_working_tree",
    "tag_already_exists",
    "push_rejected",
    "packaging_failed",
    "fetch_failed",
    "branch_failed",
    "git_failed",
    "cancelled",
    "config_invalid",
    "invalid_state",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Terminal failure of a release invocation.

    Attributes:
        kind: Failure class, mapped to a process exit code by the CLI.
        message: One-line explanation for the operator.
        hint: How to recover, when there is something useful to say.
        exit_code: Exit code of an external tool to propagate as-is.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    exit_code: int | None = None

