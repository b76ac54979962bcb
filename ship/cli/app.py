from __future__ import annotations

import sys
from pathlib import Path

import click
import typer

from ship import __version__
from ship.cli.context import build_context
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.output.errors import print_release_error, release_error_exit_code
from ship.release.orchestrator import ReleaseOrchestrator


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def release(
    signing_identity: str = typer.Option(
        ...,
        "-s",
        "--sign",
        help="Code signing identity, e.g. 'Developer ID Application: Jane Doe (TEAMID)'",
    ),
    output_directory: Path = typer.Option(
        ...,
        "-o",
        "--output",
        help="Existing directory that receives <app>-<version>.tar.gz",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        envvar="SHIP_CONFIG",
        help="Path to release.toml (default: ./release.toml if present)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        is_eager=True,
        callback=_show_version,
        help="Show version and exit.",
    ),
) -> None:
    """Build, verify, notarize, staple, archive and sign a release."""
    ctx = build_context(config_path)

    orchestrator = ReleaseOrchestrator(ctx.config, ctx.console)
    result = orchestrator.run(signing_identity, output_directory.expanduser().absolute())
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    ctx.console.success(f"released {result.value.archive_name}")


def main() -> None:
    """Console entry point.

    Click reports usage errors with exit status 2; this command uses 1 for
    every input error.
    """
    command = typer.main.get_command(app)
    try:
        code = command.main(prog_name="ship", standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(int(ErrorCode.USER_ERROR))
    except click.Abort:
        typer.echo("Aborted!", err=True)
        sys.exit(int(ErrorCode.USER_ERROR))
    sys.exit(code if isinstance(code, int) else 0)
