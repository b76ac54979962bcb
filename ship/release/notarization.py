"""Notarization verdict parsing.

`notarytool submit --wait --output-format plist` prints a property list
with at least `id`, `status` and `message`. Only status "Accepted" lets
the release continue.
"""

from __future__ import annotations

import plistlib
from dataclasses import dataclass
from xml.parsers.expat import ExpatError

from ship.core.result import Err, Ok, Result
from ship.release.errors import ReleaseError
from ship.release.model import ReleaseState

__all__ = ["ACCEPTED", "NotarizationVerdict", "parse_verdict"]

ACCEPTED = "Accepted"


@dataclass(frozen=True, slots=True)
class NotarizationVerdict:
    submission_id: str | None
    status: str
    message: str

    @property
    def accepted(self) -> bool:
        return self.status == ACCEPTED


def parse_verdict(output: str) -> Result[NotarizationVerdict, ReleaseError]:
    try:
        data: object = plistlib.loads(output.encode("utf-8"))
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        return Err(
            ReleaseError(
                stage=ReleaseState.NOTARIZING,
                kind="tool_failed",
                message=f"unreadable notarization response: {e}",
                output=output,
            )
        )

    if not isinstance(data, dict):
        return Err(
            ReleaseError(
                stage=ReleaseState.NOTARIZING,
                kind="tool_failed",
                message="notarization response is not a dictionary",
                output=output,
            )
        )

    submission_id = data.get("id")
    status = data.get("status")
    message = data.get("message")
    return Ok(
        NotarizationVerdict(
            submission_id=submission_id if isinstance(submission_id, str) else None,
            status=status if isinstance(status, str) else "Unknown",
            message=message if isinstance(message, str) else "",
        )
    )
