from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class ReleaseState(StrEnum):
    """States of one release run.

    The run moves strictly forward through `STAGE_ORDER`; FAILED is
    absorbing and reachable from every state except DONE.
    """

    VALIDATING = "validating"
    BUILDING = "building"
    VERIFYING = "verifying"
    NOTARIZING = "notarizing"
    STAPLING = "stapling"
    ARCHIVING = "archiving"
    SIGNING = "signing"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ReleaseState.DONE, ReleaseState.FAILED)


STAGE_ORDER: tuple[ReleaseState, ...] = (
    ReleaseState.VALIDATING,
    ReleaseState.BUILDING,
    ReleaseState.VERIFYING,
    ReleaseState.NOTARIZING,
    ReleaseState.STAPLING,
    ReleaseState.ARCHIVING,
    ReleaseState.SIGNING,
    ReleaseState.REPORTING,
)


def next_state(state: ReleaseState) -> ReleaseState:
    """The state entered after `state` succeeds."""
    if state.is_terminal:
        return state
    index = STAGE_ORDER.index(state)
    if index + 1 == len(STAGE_ORDER):
        return ReleaseState.DONE
    return STAGE_ORDER[index + 1]


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Operator input, as given on the command line."""

    signing_identity: str
    output_directory: Path


@dataclass(frozen=True, slots=True)
class VersionInfo:
    marketing_version: str  # e.g. 1.2.3
    build_number: str  # e.g. 45

    @property
    def display(self) -> str:
        return f"{self.marketing_version} ({self.build_number})"


@dataclass(frozen=True, slots=True)
class ArchivePaths:
    working_archive_name: str
    notarization_archive_name: str
    final_archive_path: Path

    @property
    def final_archive_name(self) -> str:
        return self.final_archive_path.name

    @classmethod
    def compute(
        cls, *, app_name: str, version: VersionInfo, output_directory: Path
    ) -> ArchivePaths:
        """Derive every archive name from the app name and marketing version.

        Names embed the version, so two releases of different versions never
        share a file name.
        """
        stem = f"{app_name.lower()}-{version.marketing_version}"
        return cls(
            working_archive_name=f"{stem}.xcarchive",
            notarization_archive_name=f"{stem}.zip",
            final_archive_path=output_directory / f"{stem}.tar.gz",
        )


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Everything a stage needs to know, fixed once validation succeeds."""

    request: ReleaseRequest
    version: VersionInfo
    paths: ArchivePaths
    build_directory: Path
    app_bundle_name: str  # Phoenix.app

    @property
    def working_archive_path(self) -> Path:
        return self.build_directory / self.paths.working_archive_name

    @property
    def notarization_archive_path(self) -> Path:
        return self.build_directory / self.paths.notarization_archive_name

    @property
    def exported_app_path(self) -> Path:
        return self.build_directory / self.app_bundle_name


@dataclass(frozen=True, slots=True)
class UpdateSignature:
    """Detached EdDSA signature of the distributable archive."""

    value: str
    length: int | None = None  # as reported by the signing tool


@dataclass(frozen=True, slots=True)
class Artifacts:
    """Values one stage produces for a later one."""

    app_path: Path | None = None
    signature: UpdateSignature | None = None
    report: ReleaseReport | None = None


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    date: str
    version: VersionInfo
    archive_name: str
    size: int
    sha256: str
    signature: str
