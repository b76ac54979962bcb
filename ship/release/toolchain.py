"""Invocations of the external release tools.

Each method builds one command line and runs it from the project root.
Nothing here interprets tool output beyond the exit code; parsing lives
in `signature` and `notarization`.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable
from pathlib import Path

from ship.core.config import ReleaseConfig
from ship.core.result import Result
from ship.platform.process import ProcessError, Runner, run

__all__ = ["Toolchain", "REQUIRED_TOOLS"]

REQUIRED_TOOLS: tuple[str, ...] = ("xcodebuild", "codesign", "spctl", "ditto", "xcrun", "tar")

Which = Callable[[str], str | None]


class Toolchain:
    def __init__(
        self,
        config: ReleaseConfig,
        *,
        runner: Runner = run,
        which: Which = shutil.which,
    ) -> None:
        self._config = config
        self._runner = runner
        self._which = which

    @property
    def sign_update_command(self) -> str:
        """`sign_update` as configured: a bare name on PATH or a project-relative path."""
        tool = self._config.signing.sign_update
        if os.sep in tool or "/" in tool:
            return str(self._config.root / tool)
        return tool

    def missing_tools(self) -> list[str]:
        """Tools that cannot be found, in the order they are needed."""
        missing = [tool for tool in REQUIRED_TOOLS if self._which(tool) is None]

        sign_update = self.sign_update_command
        if sign_update == self._config.signing.sign_update:
            found = self._which(sign_update) is not None
        else:
            found = Path(sign_update).is_file() and os.access(sign_update, os.X_OK)
        if not found:
            missing.append(sign_update)
        return missing

    def _run(self, cmd: list[str]) -> Result[str, ProcessError]:
        return self._runner(cmd, self._config.root)

    # Build

    def archive(self, archive_path: Path, signing_identity: str) -> Result[str, ProcessError]:
        app = self._config.app
        return self._run(
            [
                "xcodebuild",
                "-workspace",
                app.workspace_path,
                "-scheme",
                app.scheme_name,
                "-configuration",
                app.configuration,
                "-archivePath",
                str(archive_path),
                "clean",
                "archive",
                f"CODE_SIGN_IDENTITY={signing_identity}",
            ]
        )

    def export(self, archive_path: Path, export_path: Path) -> Result[str, ProcessError]:
        return self._run(
            [
                "xcodebuild",
                "-exportArchive",
                "-archivePath",
                str(archive_path),
                "-exportPath",
                str(export_path),
                "-exportOptionsPlist",
                str(self._config.root / self._config.app.export_options),
            ]
        )

    # Verify

    def verify_signature(self, app_path: Path) -> Result[str, ProcessError]:
        return self._run(
            ["codesign", "--verify", "--deep", "--strict", "--verbose=2", str(app_path)]
        )

    def assess(self, app_path: Path) -> Result[str, ProcessError]:
        return self._run(["spctl", "--assess", "--type", "execute", "--verbose", str(app_path)])

    # Notarize

    def zip_for_notarization(self, app_path: Path, zip_path: Path) -> Result[str, ProcessError]:
        # --keepParent keeps Phoenix.app/ as the top-level entry
        return self._run(["ditto", "-c", "-k", "--keepParent", str(app_path), str(zip_path)])

    def notarize(self, zip_path: Path) -> Result[str, ProcessError]:
        """Submit and block until the notarization service returns a verdict."""
        notarization = self._config.notarization
        cmd = [
            "xcrun",
            "notarytool",
            "submit",
            str(zip_path),
            "--keychain-profile",
            notarization.keychain_profile,
            "--wait",
            "--output-format",
            "plist",
        ]
        if notarization.timeout:
            cmd += ["--timeout", notarization.timeout]
        return self._run(cmd)

    def notarization_log(self, submission_id: str) -> Result[str, ProcessError]:
        return self._run(
            [
                "xcrun",
                "notarytool",
                "log",
                submission_id,
                "--keychain-profile",
                self._config.notarization.keychain_profile,
            ]
        )

    def staple(self, app_path: Path) -> Result[str, ProcessError]:
        return self._run(["xcrun", "stapler", "staple", str(app_path)])

    # Distribute

    def compress(self, app_path: Path, destination: Path) -> Result[str, ProcessError]:
        return self._run(
            ["tar", "-czf", str(destination), "-C", str(app_path.parent), app_path.name]
        )

    def sign_update(self, archive_path: Path) -> Result[str, ProcessError]:
        return self._run([self.sign_update_command, str(archive_path)])
