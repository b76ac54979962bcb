"""Scripted stand-ins for the external release tools."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ship.core.config import AppConfig, BuildConfig, ReleaseConfig
from ship.core.result import Err, Ok, Result
from ship.output.console import MockConsole
from ship.platform.process import ProcessError
from ship.release.orchestrator import ReleaseOrchestrator
from ship.release.toolchain import Toolchain

Handler = Callable[[list[str]], Result[str, ProcessError]]

FIXED_NOW = datetime(2026, 10, 17, 14, 5, 9, tzinfo=timezone(timedelta(hours=2)))

ACCEPTED_PLIST = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>id</key>
    <string>2efe2717-52ef-43a5-96dc-0797e4ca1041</string>
    <key>message</key>
    <string>Processing complete</string>
    <key>status</key>
    <string>Accepted</string>
</dict>
</plist>
"""

INVALID_PLIST = ACCEPTED_PLIST.replace("Accepted", "Invalid")

PBXPROJ_TEMPLATE = """// !$*UTF8*$!
{
	objects = {
/* Begin XCBuildConfiguration section */
		0A1 /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				ALWAYS_SEARCH_USER_PATHS = NO;
				ONLY_ACTIVE_ARCH = YES;
			};
			name = Debug;
		};
		0A2 /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				CODE_SIGN_STYLE = Manual;
				CURRENT_PROJECT_VERSION = {build};
				MARKETING_VERSION = {version};
				PRODUCT_BUNDLE_IDENTIFIER = org.example.Phoenix;
			};
			name = Release;
		};
/* End XCBuildConfiguration section */
	};
}
"""


def write_project(root: Path, *, version: str = "1.2.3", build: str = "45", app: str = "Phoenix") -> Path:
    project_file = root / f"{app}.xcodeproj" / "project.pbxproj"
    project_file.parent.mkdir(parents=True)
    project_file.write_text(
        PBXPROJ_TEMPLATE.replace("{version}", version).replace("{build}", build),
        encoding="utf-8",
    )
    return project_file


def tool_key(cmd: list[str]) -> str:
    """Short name identifying which tool invocation a command is."""
    name = Path(cmd[0]).name
    if name == "xcodebuild":
        return "xcodebuild export" if "-exportArchive" in cmd else "xcodebuild archive"
    if name == "xcrun":
        return " ".join(cmd[1:3])
    return name


def fail(returncode: int = 1, stderr: str = "", stdout: str = "") -> Handler:
    def handler(cmd: list[str]) -> Result[str, ProcessError]:
        return Err(ProcessError(tuple(cmd), returncode, stdout, stderr))

    return handler


def succeed(stdout: str = "") -> Handler:
    return lambda cmd: Ok(stdout)


def _export(cmd: list[str]) -> Result[str, ProcessError]:
    export_path = Path(cmd[cmd.index("-exportPath") + 1])
    (export_path / "Phoenix.app" / "Contents").mkdir(parents=True)
    return Ok("** EXPORT SUCCEEDED **\n")


def _tar(cmd: list[str]) -> Result[str, ProcessError]:
    Path(cmd[2]).write_bytes(b"\x1f\x8b phoenix release payload")
    return Ok("")


def _sign_update(cmd: list[str]) -> Result[str, ProcessError]:
    size = Path(cmd[1]).stat().st_size
    return Ok(f'sparkle:edSignature="c2lnbmF0dXJl+/==" length="{size}"\n')


def _default_handlers() -> dict[str, Handler]:
    return {
        "xcodebuild export": _export,
        "notarytool submit": succeed(ACCEPTED_PLIST),
        "tar": _tar,
        "sign_update": _sign_update,
    }


@dataclass
class FakeRunner:
    """Records every command; unscripted tools succeed with empty output."""

    handlers: dict[str, Handler] = field(default_factory=_default_handlers)
    calls: list[list[str]] = field(default_factory=lambda: [])
    cwds: list[Path] = field(default_factory=lambda: [])

    def __call__(self, cmd: list[str], cwd: Path) -> Result[str, ProcessError]:
        self.calls.append(cmd)
        self.cwds.append(cwd)
        handler = self.handlers.get(tool_key(cmd))
        if handler is None:
            return Ok("")
        return handler(cmd)

    @property
    def keys(self) -> list[str]:
        return [tool_key(c) for c in self.calls]

    def invoked(self, key: str) -> bool:
        return key in self.keys


@dataclass
class Harness:
    config: ReleaseConfig
    output: Path
    runner: FakeRunner
    console: MockConsole
    orchestrator: ReleaseOrchestrator

    def run(self, identity: str = "Developer ID Application: Jane Doe (TEAM123)"):
        return self.orchestrator.run(identity, self.output)


def make_harness(
    tmp_path: Path,
    *,
    version: str = "1.2.3",
    build: str = "45",
    build_directory: str = "build",
    handlers: dict[str, Handler] | None = None,
) -> Harness:
    root = tmp_path / "project"
    root.mkdir()
    write_project(root, version=version, build=build)
    output = tmp_path / "out"
    output.mkdir()

    config = ReleaseConfig(
        root=root,
        app=AppConfig(name="Phoenix"),
        build=BuildConfig(directory=build_directory),
    )
    runner = FakeRunner()
    if handlers:
        runner.handlers.update(handlers)
    console = MockConsole()
    tools = Toolchain(config, runner=runner, which=lambda name: f"/usr/bin/{name}")
    orchestrator = ReleaseOrchestrator(config, console, tools=tools, now=lambda: FIXED_NOW)
    return Harness(config=config, output=output, runner=runner, console=console, orchestrator=orchestrator)
