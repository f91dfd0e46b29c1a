"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from scopectl import __version__
from scopectl.cli.commands import check, config, devices, restore, scan
from scopectl.core.logging import configure_logging
from scopectl.core.settings import SettingsError, load_settings_or_default
from scopectl.utils.formatting import print_error

# Create main Typer app
app = typer.Typer(
    name="scopectl",
    help="Keep backup and restore walks inside their symlink scope and devices.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"scopectl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every decision, including rejection diagnostics.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file (default: ~/.config/scopectl/config.toml).",
        ),
    ] = None,
) -> None:
    """scopectl - symlink scope and device boundary guards.

    Scan a tree the way a backup would, restore a scanned tree the way
    a restore would, or check single paths against a scope.
    """
    try:
        settings = load_settings_or_default(config_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    if verbose:
        level = "debug"
    elif quiet:
        level = "error"
    else:
        level = settings.log_level
    configure_logging(level)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings


# Register commands
app.command(name="scan")(scan.scan)
app.command(name="restore")(restore.restore)
app.command(name="devices")(devices.devices)
app.add_typer(check.app, name="check")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
