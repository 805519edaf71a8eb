"""Release state machine.

    init -> validated -> confirmed -> fetched -> branch_ready -> tagged
         -> pushed -> published -> done

Any failure ends in `aborted`. Guards run before the first mutation, so a
dirty tree, a malformed version or a cancelled confirmation leave the
repository untouched. Once git mutation begins nothing is rolled back:
branches and tags are shared state the operator must see.

Patch releases stay in branch_ready for one extra round while the
operator cherry-picks fixes onto the release branch.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Literal

from tagrel.core.config import ReleaseSettings
from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import ConsoleProtocol, Style
from tagrel.release.confirm import Checkpoint, ConfirmationToken, OperatorConfirmation
from tagrel.release.errors import ReleaseError
from tagrel.release.fsm import FINISH, StepHandler, StepOutcome, advance, run_state_machine
from tagrel.release.gateway import Packager, RepositoryGateway
from tagrel.release.inputs import ReleaseInputs
from tagrel.release.packaging import release_notes_path
from tagrel.release.strategy import ReleaseStrategy, assumptions, select
from tagrel.release.version import VersionSpec, VersionValidator


class ReleaseState(StrEnum):
    INIT = "init"
    VALIDATED = "validated"
    CONFIRMED = "confirmed"
    FETCHED = "fetched"
    BRANCH_READY = "branch_ready"
    TAGGED = "tagged"
    PUSHED = "pushed"
    PUBLISHED = "published"
    DONE = "done"
    ABORTED = "aborted"


# States in which the repository may already differ from how the run found it.
_MUTATED_STATES = frozenset(
    {
        ReleaseState.BRANCH_READY,
        ReleaseState.TAGGED,
        ReleaseState.PUSHED,
        ReleaseState.PUBLISHED,
    }
)

BranchAction = Literal["trunk", "checked_out", "tracked", "created"]


@dataclass(frozen=True, slots=True)
class ReleaseSession:
    state: ReleaseState
    inputs: ReleaseInputs
    spec: VersionSpec | None = None
    strategy: ReleaseStrategy | None = None
    approval: ConfirmationToken | None = None
    branch: str | None = None
    branch_action: BranchAction | None = None
    history: tuple[ReleaseState, ...] = ()

    @property
    def tag(self) -> str | None:
        return self.spec.tag if self.spec is not None else None


def _to(session: ReleaseSession, state: ReleaseState, **changes: object) -> ReleaseSession:
    return replace(session, state=state, history=(*session.history, state), **changes)


def _plan(session: ReleaseSession) -> tuple[VersionSpec, ReleaseStrategy]:
    if session.spec is None or session.strategy is None:
        raise AssertionError(f"release step {session.state} reached without a version plan")
    return session.spec, session.strategy


def _require_approval(
    session: ReleaseSession, checkpoint: Checkpoint
) -> Result[None, ReleaseError]:
    if session.approval is None or session.approval.checkpoint != checkpoint:
        return Err(
            ReleaseError(
                kind="invalid_state",
                message=f"no operator approval for the {checkpoint.replace('_', '-')} checkpoint",
            )
        )
    return Ok(None)


class ReleaseOrchestrator:
    """Sequences git calls and confirmations for one release.

    The orchestrator owns the ordering of gateway calls; the gateway, the
    validator, the confirmation source and the packaging tool are injected.

    Attributes:
        last_session: Most recent session, including after a failure.
    """

    def __init__(
        self,
        *,
        repo: RepositoryGateway,
        validator: VersionValidator,
        confirmation: OperatorConfirmation,
        packager: Packager,
        console: ConsoleProtocol,
        settings: ReleaseSettings | None = None,
        repo_root: Path | None = None,
    ) -> None:
        self.repo = repo
        self.validator = validator
        self.confirmation = confirmation
        self.packager = packager
        self.console = console
        self.settings = settings or ReleaseSettings()
        self.repo_root = repo_root
        self.last_session: ReleaseSession | None = None

    def run(self, inputs: ReleaseInputs) -> Result[ReleaseSession, ReleaseError]:
        initial = ReleaseSession(
            state=ReleaseState.INIT, inputs=inputs, history=(ReleaseState.INIT,)
        )
        self.last_session = initial

        result = run_state_machine(
            initial_state=initial,
            get_step=lambda s: s.state.value,
            handlers=self._handlers(),
            on_advance=self._record,
        )
        if isinstance(result, Err):
            reached = self.last_session
            if reached.state in _MUTATED_STATES:
                self.console.warning(
                    f"stopped after {reached.state}; completed steps were left in place"
                )
            self._record(_to(reached, ReleaseState.ABORTED))
            return result

        done = _to(result.value, ReleaseState.DONE)
        self._record(done)
        return Ok(done)

    def _record(self, session: ReleaseSession) -> None:
        self.last_session = session

    def _handlers(self) -> dict[str, StepHandler[ReleaseSession]]:
        return {
            ReleaseState.INIT.value: self._validate,
            ReleaseState.VALIDATED.value: self._confirm,
            ReleaseState.CONFIRMED.value: self._fetch,
            ReleaseState.FETCHED.value: self._ready_branch,
            ReleaseState.BRANCH_READY.value: self._tag,
            ReleaseState.TAGGED.value: self._push_tag,
            ReleaseState.PUSHED.value: self._publish,
            ReleaseState.PUBLISHED.value: self._summarize,
        }

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _validate(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        status = self.repo.status()
        if isinstance(status, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"cannot read working tree status: {status.error.message}",
                )
            )
        if not status.value.is_clean:
            entries = status.value.entries
            shown = ", ".join(e.path for e in entries[:5])
            if len(entries) > 5:
                shown += f" (+{len(entries) - 5} more)"
            return Err(
                ReleaseError(
                    kind="dirty_working_tree",
                    message=f"your git working directory is dirty: {shown}",
                    hint="clean up untracked files and stash any changes before proceeding",
                )
            )

        version = session.inputs.version
        verified = self.validator.verify(version)
        if isinstance(verified, Err):
            return verified
        parsed = self.validator.components(version)
        if isinstance(parsed, Err):
            return parsed

        spec = parsed.value
        if spec.tag != version:
            self.console.warning(f"version {version} will be tagged as {spec.tag}")
        return Ok(advance(_to(session, ReleaseState.VALIDATED, spec=spec, strategy=select(spec))))

    def _confirm(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        spec, strategy = _plan(session)
        c = self.console
        s = self.settings

        c.header("Release plan")
        c.print(f"You've provided a version string of {session.inputs.version}.")
        c.print("Based on this, the following assumptions have been made:")
        for line in assumptions(spec):
            c.print(f"  * {line}")
        c.print(f"tag: {spec.tag}", Style.DIM)
        target = strategy.target_branch(s.trunk)
        if strategy.is_patch:
            c.print(f"branch: {target} (cherry-pick fixes onto it)", Style.DIM)
        else:
            c.print(f"branch: {s.remote}/{target}", Style.DIM)

        notes = release_notes_path(spec, s.changelog_dir)
        c.print(f"release notes: {notes}", Style.DIM)
        if self.repo_root is not None and not (self.repo_root / notes).is_file():
            c.warning(f"release notes file not found: {notes}")

        c.newline()
        c.print("If this is all correct, press enter/return to proceed to TAG THE RELEASE and UPLOAD THE TAG.")
        c.print("Otherwise, press ctrl-c to CANCEL the process without making any changes.")
        token = self.confirmation.request("release", "Ready to continue?")
        if isinstance(token, Err):
            return token

        return Ok(advance(_to(session, ReleaseState.CONFIRMED, approval=token.value)))

    def _fetch(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        gate = _require_approval(session, "release")
        if isinstance(gate, Err):
            return gate
        spec, _ = _plan(session)
        remote = self.settings.remote

        self.console.info(f"pulling down all git tags and branches from {remote}")
        fetched = self.repo.fetch(remote)
        if isinstance(fetched, Err):
            return Err(
                ReleaseError(
                    kind="fetch_failed",
                    message=f"fetch from {remote} failed: {fetched.error.message}",
                    hint="check network access and credentials, then re-run",
                )
            )

        # The fetch brought in every upstream tag. An existing tag only fails
        # the tag step, so a re-run can still reach the release branch.
        if self.repo.tag_exists(spec.tag).unwrap_or(False):
            self.console.warning(f"tag {spec.tag} already exists; tagging will be refused")

        return Ok(advance(_to(session, ReleaseState.FETCHED)))

    def _ready_branch(
        self, session: ReleaseSession
    ) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        _, strategy = _plan(session)
        ready = self.ready_branch(strategy)
        if isinstance(ready, Err):
            return ready

        branch, action = ready.value
        return Ok(
            advance(_to(session, ReleaseState.BRANCH_READY, branch=branch, branch_action=action))
        )

    def ready_branch(self, strategy: ReleaseStrategy) -> Result[tuple[str, BranchAction], ReleaseError]:
        """Check out the branch a release is cut from.

        Idempotent for patch releases: an existing release branch is checked
        out, never re-created.
        """
        remote = self.settings.remote
        c = self.console

        if strategy.release_branch is None:
            ref = f"{remote}/{strategy.target_branch(self.settings.trunk)}"
            c.info(f"checking out {ref}")
            return self._checked(self.repo.checkout(ref), ref, "trunk")

        branch = strategy.release_branch
        presence = self.repo.branch_presence(branch, remote)
        if isinstance(presence, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"cannot look up branch {branch}: {presence.error.message}",
                )
            )

        if presence.value.local:
            c.info(f"release branch {branch} exists already")
            return self._checked(self.repo.checkout(branch), branch, "checked_out")
        if presence.value.remote:
            c.info(f"release branch {branch} exists on {remote}; tracking it")
            created = self.repo.create_branch(branch, start=f"{remote}/{branch}")
            return self._checked(created, branch, "tracked")

        created = self.repo.create_branch(branch)
        if isinstance(created, Ok):
            c.success(f"release branch {branch} made")
        return self._checked(created, branch, "created")

    def _checked(
        self, result: Result[None, object], branch: str, action: BranchAction
    ) -> Result[tuple[str, BranchAction], ReleaseError]:
        if isinstance(result, Err):
            detail = getattr(result.error, "message", str(result.error))
            return Err(
                ReleaseError(
                    kind="branch_failed",
                    message=f"cannot check out {branch}: {detail}",
                )
            )
        return Ok((branch, action))

    def _tag(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        spec, strategy = _plan(session)
        remote = self.settings.remote
        c = self.console

        if strategy.is_patch and (
            session.approval is None or session.approval.checkpoint != "cherry_pick"
        ):
            c.header("Cherry-pick")
            c.print(f"Cherry-pick any relevant commits into {session.branch} now.")
            c.print("Either pause this command with ctrl-z, or do the cherry-picking in another terminal.")
            token = self.confirmation.request(
                "cherry_pick",
                "Press enter when you're done cherry-picking. THIS WILL PUSH THE BRANCH AND TAG UPSTREAM",
            )
            if isinstance(token, Err):
                return token
            return Ok(advance(_to(session, ReleaseState.BRANCH_READY, approval=token.value)))

        gate = _require_approval(session, "cherry_pick" if strategy.is_patch else "release")
        if isinstance(gate, Err):
            return gate

        absent = self._check_tag_absent(spec.tag)
        if isinstance(absent, Err):
            return absent

        if strategy.release_branch is not None:
            c.info(f"pushing {strategy.release_branch} to {remote}")
            pushed = self.repo.push_branch(remote, strategy.release_branch)
            if isinstance(pushed, Err):
                return Err(
                    ReleaseError(
                        kind="push_rejected",
                        message=f"push of {strategy.release_branch} to {remote} rejected: {pushed.error.message}",
                        hint="integrate the remote branch, then re-run; the branch is checked out, not re-created",
                    )
                )

        c.info(f"tagging {spec.tag}")
        created = self.repo.create_tag(spec.tag)
        if isinstance(created, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"cannot create tag {spec.tag}: {created.error.message}",
                )
            )

        return Ok(advance(_to(session, ReleaseState.TAGGED)))

    def _push_tag(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        spec, _ = _plan(session)
        remote = self.settings.remote

        self.console.info(f"pushing {spec.tag} to {remote}")
        pushed = self.repo.push_tag(remote, spec.tag)
        if isinstance(pushed, Err):
            return Err(
                ReleaseError(
                    kind="push_rejected",
                    message=f"push of tag {spec.tag} to {remote} rejected: {pushed.error.message}",
                    hint=f"the tag exists locally only; push it by hand or remove it with `git tag -d {spec.tag}`",
                )
            )

        return Ok(advance(_to(session, ReleaseState.PUSHED)))

    def _publish(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        spec, _ = _plan(session)
        notes = release_notes_path(spec, self.settings.changelog_dir)

        self.console.info("invoking the packaging tool to create the release")
        published = self.packager.publish(notes_path=notes, token=session.inputs.token)
        if isinstance(published, Err):
            return published

        return Ok(advance(_to(session, ReleaseState.PUBLISHED)))

    def _summarize(self, session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        spec, _ = _plan(session)
        self.console.success(f"released {spec.tag}")
        self.console.print(f"branch: {session.branch}", Style.DIM)
        self.console.print(
            f"release notes: {release_notes_path(spec, self.settings.changelog_dir)}", Style.DIM
        )
        return Ok(FINISH)

    def _check_tag_absent(self, tag: str) -> Result[None, ReleaseError]:
        exists = self.repo.tag_exists(tag)
        if isinstance(exists, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"cannot list tags: {exists.error.message}",
                )
            )
        if exists.value:
            return Err(
                ReleaseError(
                    kind="tag_already_exists",
                    message=f"tag {tag} already exists",
                    hint="releases are immutable once tagged; pick the next version instead",
                )
            )
        return Ok(None)
