"""Release pipeline: validate, build, verify, notarize, staple, archive, sign, report."""

from .errors import ReleaseError
from .model import (
    ArchivePaths,
    ReleasePlan,
    ReleaseReport,
    ReleaseRequest,
    ReleaseState,
    VersionInfo,
)
from .orchestrator import ReleaseOrchestrator

__all__ = [
    "ArchivePaths",
    "ReleaseError",
    "ReleaseOrchestrator",
    "ReleasePlan",
    "ReleaseReport",
    "ReleaseRequest",
    "ReleaseState",
    "VersionInfo",
]
