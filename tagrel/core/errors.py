"""Exit codes for the release CLI.

Calling automation relies on these values to tell failure classes apart,
so they must remain stable. The first three match the historical shell
release script (missing input, invalid version, dirty tree).
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Done, the release was tagged, pushed and handed to packaging
    - 1: A required input (version, token) is missing
    - 2: The version string was rejected by the validator
    - 3: The working tree has uncommitted or untracked changes
    - 4: The tag already exists
    - 5: A push (branch or tag) was rejected
    - 6: The packaging tool failed to start
    - 7: Any other git failure (fetch, checkout, branch creation)
    - 8: The configuration file is invalid
    - 64: The command line itself is wrong (unknown option, bad value)
    - 130: The operator cancelled at a confirmation checkpoint
    """

    OK = 0
    MISSING_INPUT = 1
    INVALID_VERSION = 2
    DIRTY_WORKING_TREE = 3
    TAG_EXISTS = 4
    PUSH_REJECTED = 5
    PACKAGING_FAILED = 6
    GIT_ERROR = 7
    CONFIG_ERROR = 8
    USAGE_ERROR = 64
    CANCELLED = 130

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")
