"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ship.core.errors import ErrorCode
from ship.output.console import Style
from ship.release.errors import ReleaseError

if TYPE_CHECKING:
    from ship.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print the failing stage, then the tool's own output untouched."""
    console.error(f"release failed while {error.stage}: {error.message}")
    if error.output:
        console.raw(error.output)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "invalid_input" | "precondition":
            return int(ErrorCode.USER_ERROR)
        case "missing_tool" | "config_invalid" | "version_unreadable":
            return int(ErrorCode.ENV_ERROR)
        case _:
            return int(ErrorCode.TOOL_ERROR)
