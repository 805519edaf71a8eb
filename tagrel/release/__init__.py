"""Release flow: version validation, strategy selection and the tagging sequence.

- version: VersionSpec and the validators that produce it
- strategy: GA / pre-release / patch selection
- orchestrator: the state machine driving git and the packaging tool
"""

from __future__ import annotations

from tagrel.release.errors import ReleaseError
from tagrel.release.inputs import ReleaseInputs
from tagrel.release.orchestrator import ReleaseOrchestrator, ReleaseSession, ReleaseState
from tagrel.release.strategy import ReleaseStrategy, select
from tagrel.release.version import VersionSpec

__all__ = [
    "ReleaseError",
    "ReleaseInputs",
    "ReleaseOrchestrator",
    "ReleaseSession",
    "ReleaseState",
    "ReleaseStrategy",
    "VersionSpec",
    "select",
]
