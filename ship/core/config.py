"""Typed release configuration.

The release is driven by two operator inputs (signing identity, output
directory). Everything project-specific (app name, Xcode workspace,
notarization profile, signing tool) lives in an optional `release.toml`
next to the Xcode workspace:

    [app]
    name = "Phoenix"
    workspace = "Phoenix.xcworkspace"
    scheme = "Phoenix"
    configuration = "Release"
    project_file = "Phoenix.xcodeproj/project.pbxproj"
    export_options = "ExportOptions.plist"

    [build]
    directory = "build"

    [notarization]
    keychain_profile = "NOTARISATION_PASSWORD"
    timeout = "2h"

    [signing]
    sign_update = "sign_update"
    signature_attribute = "sparkle:edSignature"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "AppConfig",
    "BuildConfig",
    "ConfigError",
    "NotarizationConfig",
    "ReleaseConfig",
    "SigningConfig",
    "CONFIG_FILENAME",
    "DEFAULT_KEYCHAIN_PROFILE",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "release.toml"

DEFAULT_APP_NAME = "Phoenix"
DEFAULT_CONFIGURATION = "Release"
DEFAULT_EXPORT_OPTIONS = "ExportOptions.plist"
DEFAULT_BUILD_DIRECTORY = "build"
DEFAULT_KEYCHAIN_PROFILE = "NOTARISATION_PASSWORD"
DEFAULT_SIGN_UPDATE = "sign_update"
DEFAULT_SIGNATURE_ATTRIBUTE = "sparkle:edSignature"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    """The application being released and where Xcode finds it.

    `workspace`, `scheme` and `project_file` default to values derived
    from `name` when left out of the config file.
    """

    name: str = DEFAULT_APP_NAME
    workspace: str | None = None
    scheme: str | None = None
    configuration: str = DEFAULT_CONFIGURATION
    project_file: str | None = None
    export_options: str = DEFAULT_EXPORT_OPTIONS

    @property
    def workspace_path(self) -> str:
        return self.workspace or f"{self.name}.xcworkspace"

    @property
    def scheme_name(self) -> str:
        return self.scheme or self.name

    @property
    def project_file_path(self) -> str:
        return self.project_file or f"{self.name}.xcodeproj/project.pbxproj"

    @property
    def bundle_name(self) -> str:
        return f"{self.name}.app"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    directory: str = DEFAULT_BUILD_DIRECTORY


@dataclass(frozen=True, slots=True)
class NotarizationConfig:
    """Notarization client settings.

    `timeout` is passed verbatim to `notarytool --timeout` (e.g. "2h").
    None leaves the wait unbounded.
    """

    keychain_profile: str = DEFAULT_KEYCHAIN_PROFILE
    timeout: str | None = None


@dataclass(frozen=True, slots=True)
class SigningConfig:
    sign_update: str = DEFAULT_SIGN_UPDATE
    signature_attribute: str = DEFAULT_SIGNATURE_ATTRIBUTE


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container.

    `root` is the directory holding the Xcode workspace; every relative
    path in the config is resolved against it and every tool runs there.
    """

    root: Path = field(default_factory=Path.cwd)
    app: AppConfig = field(default_factory=AppConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    notarization: NotarizationConfig = field(default_factory=NotarizationConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)

    @property
    def build_directory(self) -> Path:
        return self.root / self.build.directory

    @property
    def project_file(self) -> Path:
        return self.root / self.app.project_file_path

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, root: Path) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML)."""
        app: StrDict = get_table(data, "app") or {}
        build: StrDict = get_table(data, "build") or {}
        notarization: StrDict = get_table(data, "notarization") or {}
        signing: StrDict = get_table(data, "signing") or {}

        return cls(
            root=root,
            app=AppConfig(
                name=get_str(app, "name") or DEFAULT_APP_NAME,
                workspace=get_str(app, "workspace"),
                scheme=get_str(app, "scheme"),
                configuration=get_str(app, "configuration") or DEFAULT_CONFIGURATION,
                project_file=get_str(app, "project_file"),
                export_options=get_str(app, "export_options") or DEFAULT_EXPORT_OPTIONS,
            ),
            build=BuildConfig(
                directory=get_str(build, "directory") or DEFAULT_BUILD_DIRECTORY,
            ),
            notarization=NotarizationConfig(
                keychain_profile=get_str(notarization, "keychain_profile")
                or DEFAULT_KEYCHAIN_PROFILE,
                timeout=get_str(notarization, "timeout"),
            ),
            signing=SigningConfig(
                sign_update=get_str(signing, "sign_update") or DEFAULT_SIGN_UPDATE,
                signature_attribute=get_str(signing, "signature_attribute")
                or DEFAULT_SIGNATURE_ATTRIBUTE,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse a release.toml file.

    Args:
        path: Path to the config file. Its parent becomes the project root.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = ReleaseConfig.from_dict(result.value, root=path.parent.resolve())
        return Ok(config)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load `<root>/release.toml`, or fall back to defaults if it doesn't exist.

    A config file that exists but is invalid is still an error.
    """
    path = root / CONFIG_FILENAME
    if not path.exists():
        return Ok(ReleaseConfig(root=root.resolve()))
    return load_config(path)
