from __future__ import annotations

from typing import NoReturn

import typer

from tagrel.core.errors import ErrorCode
from tagrel.release.errors import ReleaseError


def release_error_code(error: ReleaseError) -> int:
    """Exit code for a failed release.

    A failing packaging tool propagates its own exit status.
    """
    if error.kind == "packaging_failed" and error.exit_code:
        return error.exit_code

    match error.kind:
        case "missing_input":
            return int(ErrorCode.MISSING_INPUT)
        case "invalid_version_format":
            return int(ErrorCode.INVALID_VERSION)
        case "dirty_working_tree":
            return int(ErrorCode.DIRTY_WORKING_TREE)
        case "tag_already_exists":
            return int(ErrorCode.TAG_EXISTS)
        case "push_rejected":
            return int(ErrorCode.PUSH_REJECTED)
        case "packaging_failed":
            return int(ErrorCode.PACKAGING_FAILED)
        case "cancelled":
            return int(ErrorCode.CANCELLED)
        case "config_invalid":
            return int(ErrorCode.CONFIG_ERROR)
        case _:
            return int(ErrorCode.GIT_ERROR)


def exit_release(error: ReleaseError) -> NoReturn:
    typer.echo(f"error: {error.message}", err=True)
    if error.hint:
        typer.echo(f"hint: {error.hint}", err=True)
    raise typer.Exit(code=release_error_code(error))
