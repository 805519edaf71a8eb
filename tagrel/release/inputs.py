from __future__ import annotations

from dataclasses import dataclass, field

from tagrel.core.result import Err, Ok, Result
from tagrel.release.errors import ReleaseError

VERSION_ENV = "RELEASE_VERSION"
TOKEN_ENV = "GITHUB_TOKEN"


@dataclass(frozen=True, slots=True)
class ReleaseInputs:
    """The two required inputs of a release invocation."""

    version: str
    token: str = field(repr=False)

    @classmethod
    def from_values(
        cls, version: str | None, token: str | None
    ) -> Result[ReleaseInputs, ReleaseError]:
        """Validate raw inputs (CLI options or environment variables)."""
        version = (version or "").strip()
        token = (token or "").strip()

        if not version:
            return Err(
                ReleaseError(
                    kind="missing_input",
                    message=f"the ${VERSION_ENV} environment variable is not set",
                    hint=f"export {VERSION_ENV}=v<version.to.release> then try again",
                )
            )
        if not token:
            return Err(
                ReleaseError(
                    kind="missing_input",
                    message=f"the ${TOKEN_ENV} environment variable is not set",
                    hint=f"export {TOKEN_ENV}=<your github token> then try again",
                )
            )
        return Ok(cls(version=version, token=token))
