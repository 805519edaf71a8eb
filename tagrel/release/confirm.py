"""Operator confirmation checkpoints.

A release pauses for a human twice at most: once before anything touches
the repository, and, for patch releases, once more after the operator has
cherry-picked fixes onto the release branch. Each approval yields a token
bound to its checkpoint, so approving one never unlocks the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

import typer

from tagrel.core.result import Err, Ok, Result
from tagrel.release.errors import ReleaseError

Checkpoint = Literal["release", "cherry_pick"]


@dataclass(frozen=True, slots=True)
class ConfirmationToken:
    """One approval event for one checkpoint."""

    checkpoint: Checkpoint


class OperatorConfirmation(Protocol):
    def request(self, checkpoint: Checkpoint, prompt: str) -> Result[ConfirmationToken, ReleaseError]:
        """Block until the operator approves or cancels."""
        ...


def _cancelled(checkpoint: Checkpoint) -> ReleaseError:
    return ReleaseError(
        kind="cancelled",
        message=f"cancelled at the {checkpoint.replace('_', '-')} checkpoint",
        hint="re-run the command when ready",
    )


class PromptConfirmation:
    """Press-enter confirmation on the terminal; Ctrl-C (or EOF) cancels."""

    def request(self, checkpoint: Checkpoint, prompt: str) -> Result[ConfirmationToken, ReleaseError]:
        try:
            typer.prompt(prompt, default="", show_default=False, prompt_suffix=" ")
        except typer.Abort:
            return Err(_cancelled(checkpoint))
        return Ok(ConfirmationToken(checkpoint=checkpoint))


@dataclass
class ScriptedConfirmation:
    """Confirmation with pre-recorded answers, for tests and automation.

    Each request pops the next answer; False (or running out) cancels.
    """

    answers: list[bool] = field(default_factory=list)
    asked: list[Checkpoint] = field(default_factory=list)

    def request(self, checkpoint: Checkpoint, prompt: str) -> Result[ConfirmationToken, ReleaseError]:
        del prompt
        self.asked.append(checkpoint)
        if not self.answers or not self.answers.pop(0):
            return Err(_cancelled(checkpoint))
        return Ok(ConfirmationToken(checkpoint=checkpoint))
