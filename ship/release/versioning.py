"""Read the app's version numbers from its Xcode project.

Versions come straight from `project.pbxproj` build settings, so reading
them needs neither xcodebuild nor a build. Validation can therefore fail
on an existing archive without touching the toolchain.
"""

from __future__ import annotations

import re
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.release.errors import ReleaseError
from ship.release.model import ReleaseState, VersionInfo

__all__ = ["parse_versions", "read_versions"]

_BUILD_SETTINGS = re.compile(r"buildSettings\s*=\s*\{(.*?)\};", re.DOTALL)
_MARKETING = re.compile(r'\bMARKETING_VERSION\s*=\s*"?([0-9][0-9A-Za-z.\-]*)"?\s*;')
_BUILD = re.compile(r'\bCURRENT_PROJECT_VERSION\s*=\s*"?([0-9][0-9.]*)"?\s*;')


def _unreadable(message: str) -> ReleaseError:
    return ReleaseError(
        stage=ReleaseState.VALIDATING,
        kind="version_unreadable",
        message=message,
        hint="set MARKETING_VERSION and CURRENT_PROJECT_VERSION in the target's build settings",
    )


def parse_versions(text: str) -> Result[VersionInfo, ReleaseError]:
    """Extract the first build-settings block carrying both version keys."""
    for match in _BUILD_SETTINGS.finditer(text):
        block = match.group(1)
        marketing = _MARKETING.search(block)
        build = _BUILD.search(block)
        if marketing and build:
            return Ok(
                VersionInfo(marketing_version=marketing.group(1), build_number=build.group(1))
            )
    return Err(
        _unreadable(
            "no build settings define both MARKETING_VERSION and CURRENT_PROJECT_VERSION"
        )
    )


def read_versions(project_file: Path) -> Result[VersionInfo, ReleaseError]:
    try:
        text = project_file.read_text(encoding="utf-8")
    except OSError as e:
        return Err(_unreadable(f"cannot read project file {project_file}: {e}"))
    return parse_versions(text)
