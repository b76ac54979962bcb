from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from ship.core.config import ReleaseConfig, load_config, load_config_or_default
from ship.core.result import Err
from ship.output.console import ConsoleProtocol, RichConsole
from ship.output.errors import print_release_error, release_error_exit_code
from ship.release.errors import ReleaseError
from ship.release.model import ReleaseState


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    """Load release.toml (explicit path, or ./release.toml if present)."""
    console = RichConsole()
    if config_path is not None:
        config_result = load_config(config_path.expanduser())
    else:
        config_result = load_config_or_default(Path.cwd())

    if isinstance(config_result, Err):
        error = ReleaseError(
            stage=ReleaseState.VALIDATING,
            kind="config_invalid",
            message=config_result.error.message,
        )
        print_release_error(error, console)
        raise typer.Exit(code=release_error_exit_code(error))

    return CLIContext(config=config_result.value, console=console)
