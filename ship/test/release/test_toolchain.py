from __future__ import annotations

from pathlib import Path

from ship.core.config import NotarizationConfig, ReleaseConfig, SigningConfig
from ship.release.toolchain import REQUIRED_TOOLS, Toolchain

from ._fakes import FakeRunner


def _tools(config: ReleaseConfig, *, available: set[str] | None = None) -> tuple[Toolchain, FakeRunner]:
    runner = FakeRunner(handlers={})

    def which(name: str) -> str | None:
        if available is None or name in available:
            return f"/usr/bin/{name}"
        return None

    return Toolchain(config, runner=runner, which=which), runner


def test_archive_command(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))

    tools.archive(tmp_path / "build" / "phoenix-1.2.3.xcarchive", "Developer ID Application: Jane")

    assert runner.calls == [
        [
            "xcodebuild",
            "-workspace",
            "Phoenix.xcworkspace",
            "-scheme",
            "Phoenix",
            "-configuration",
            "Release",
            "-archivePath",
            str(tmp_path / "build" / "phoenix-1.2.3.xcarchive"),
            "clean",
            "archive",
            "CODE_SIGN_IDENTITY=Developer ID Application: Jane",
        ]
    ]
    assert runner.cwds == [tmp_path]


def test_export_uses_export_options(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))

    tools.export(tmp_path / "a.xcarchive", tmp_path / "build")

    cmd = runner.calls[0]
    assert cmd[:2] == ["xcodebuild", "-exportArchive"]
    assert cmd[cmd.index("-exportOptionsPlist") + 1] == str(tmp_path / "ExportOptions.plist")


def test_verify_commands(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))
    app = tmp_path / "Phoenix.app"

    tools.verify_signature(app)
    tools.assess(app)

    assert runner.calls[0][0] == "codesign"
    assert "--verify" in runner.calls[0]
    assert runner.calls[1] == ["spctl", "--assess", "--type", "execute", "--verbose", str(app)]


def test_notarization_zip_keeps_parent(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))

    tools.zip_for_notarization(tmp_path / "Phoenix.app", tmp_path / "phoenix-1.0.zip")

    assert runner.calls[0] == [
        "ditto",
        "-c",
        "-k",
        "--keepParent",
        str(tmp_path / "Phoenix.app"),
        str(tmp_path / "phoenix-1.0.zip"),
    ]


def test_notarize_waits_with_default_profile_and_no_timeout(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))

    tools.notarize(tmp_path / "phoenix-1.0.zip")

    cmd = runner.calls[0]
    assert cmd[:3] == ["xcrun", "notarytool", "submit"]
    assert cmd[cmd.index("--keychain-profile") + 1] == "NOTARISATION_PASSWORD"
    assert "--wait" in cmd
    assert "--timeout" not in cmd


def test_notarize_with_configured_timeout(tmp_path: Path) -> None:
    config = ReleaseConfig(
        root=tmp_path,
        notarization=NotarizationConfig(keychain_profile="release", timeout="2h"),
    )
    tools, runner = _tools(config)

    tools.notarize(tmp_path / "phoenix-1.0.zip")

    cmd = runner.calls[0]
    assert cmd[cmd.index("--keychain-profile") + 1] == "release"
    assert cmd[-2:] == ["--timeout", "2h"]


def test_compress_archives_bundle_by_name(tmp_path: Path) -> None:
    tools, runner = _tools(ReleaseConfig(root=tmp_path))
    app = tmp_path / "build" / "Phoenix.app"

    tools.compress(app, tmp_path / "out" / "phoenix-1.0.tar.gz")

    assert runner.calls[0] == [
        "tar",
        "-czf",
        str(tmp_path / "out" / "phoenix-1.0.tar.gz"),
        "-C",
        str(tmp_path / "build"),
        "Phoenix.app",
    ]


def test_sign_update_relative_path_resolves_against_root(tmp_path: Path) -> None:
    config = ReleaseConfig(root=tmp_path, signing=SigningConfig(sign_update="bin/sparkle/sign_update"))
    tools, runner = _tools(config)

    tools.sign_update(tmp_path / "a.tar.gz")

    assert runner.calls[0][0] == str(tmp_path / "bin" / "sparkle" / "sign_update")


def test_missing_tools_reports_each(tmp_path: Path) -> None:
    tools, _ = _tools(ReleaseConfig(root=tmp_path), available={"xcodebuild", "tar"})

    missing = tools.missing_tools()

    assert missing == ["codesign", "spctl", "ditto", "xcrun", "sign_update"]


def test_no_missing_tools(tmp_path: Path) -> None:
    tools, _ = _tools(ReleaseConfig(root=tmp_path), available=set(REQUIRED_TOOLS) | {"sign_update"})

    assert tools.missing_tools() == []


def test_sign_update_path_must_be_executable(tmp_path: Path) -> None:
    tool = tmp_path / "bin" / "sign_update"
    tool.parent.mkdir()
    tool.write_text("#!/bin/sh\n", encoding="utf-8")
    config = ReleaseConfig(root=tmp_path, signing=SigningConfig(sign_update="bin/sign_update"))
    tools, _ = _tools(config)

    assert tools.missing_tools() == [str(tool)]

    tool.chmod(0o755)
    assert tools.missing_tools() == []
