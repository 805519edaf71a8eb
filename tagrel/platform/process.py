"""Subprocess execution with Result-based error handling.

Two flavours:
- run(): captures output, used for git queries and the version validator
- run_streaming(): inherits the terminal, used for the packaging tool so
  the operator sees its progress live

Usage:
    match run(["git", "status", "--porcelain"], cwd=repo_root):
        case Ok(stdout):
            dirty = bool(stdout.strip())
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from tagrel.core.result import Err, Ok, Result

__all__ = ["ProcessError", "merged_env", "run", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process, negative signal number if it was
            killed, -1 if it never ran or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
        started: False when the process could not be started or timed out.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    started: bool = True

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """Most useful human-readable output of the failed process."""
        return self.stderr.strip() or self.stdout.strip()


def merged_env(overrides: Mapping[str, str]) -> dict[str, str]:
    """Current environment with overrides applied on top."""
    env = dict(os.environ)
    env.update(overrides)
    return env


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Full environment (current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
                started=False,
            )
        )
    except OSError as e:
        return Err(
            ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e), started=False)
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streaming to the terminal.

    No timeout: long-running tools (builds, uploads) are bounded by their
    own transport policies. The exit code is preserved on failure.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(
            ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e), started=False)
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)
