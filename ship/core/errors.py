"""Process exit codes.

Every failure path of the release command ends in one of these codes, so
shell scripts wrapping `ship` can tell bad input apart from a broken
toolchain or a rejected build.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the release command.

    - 0: Release fully produced
    - 1: Usage or precondition error (bad arguments, archive already exists)
    - 2: Environment error (missing tool, invalid config, unreadable version)
    - 3: Tool error (an external tool failed during a release stage)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    TOOL_ERROR = 3
