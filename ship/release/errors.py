from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ship.platform.process import ProcessError
from ship.release.model import ReleaseState


ReleaseErrorKind = Literal[
    "invalid_input",
    "precondition",
    "missing_tool",
    "config_invalid",
    "version_unreadable",
    "tool_failed",
    "artifact_missing",
    "notarization_rejected",
    "signature_not_found",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Why a release run stopped.

    `stage` is the state the run was in when it failed. `output` carries the
    failing tool's own diagnostics verbatim and is printed as-is.
    """

    stage: ReleaseState
    kind: ReleaseErrorKind
    message: str
    output: str = ""
    hint: str | None = None


def tool_failed(stage: ReleaseState, error: ProcessError, what: str) -> ReleaseError:
    """Wrap a failed tool invocation."""
    return ReleaseError(
        stage=stage,
        kind="tool_failed",
        message=f"{what}: {error}",
        output=error.output,
    )
