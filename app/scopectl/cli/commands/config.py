"""Settings commands.

Show the active settings or write a settings file with defaults for
later scan and restore runs.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from scopectl.cli.types import get_settings
from scopectl.core.paths import get_settings_path
from scopectl.core.settings import ScopeSettings, SettingsError, save_settings
from scopectl.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Show or initialize scopectl settings.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the settings in effect."""
    settings = get_settings(ctx)

    table = Table(
        title="Settings",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", no_wrap=True)
    table.add_column("Value")

    table.add_row("scope_symlinks", escape(settings.scope_symlinks or "-"))
    table.add_row("one_file_system", str(settings.one_file_system).lower())
    table.add_row("allowed_devices", escape(", ".join(settings.allowed_devices) or "-"))
    table.add_row("log_level", settings.log_level)

    console.print(table)


@app.command()
def init(
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Where to write the settings file."),
    ] = None,
    scope_symlinks: Annotated[
        Path | None,
        typer.Option("--scope-symlinks", "-s", help="Default symlink scope."),
    ] = None,
    one_file_system: Annotated[
        bool,
        typer.Option("--one-file-system", "-x", help="Stay on one device by default."),
    ] = False,
    allow_device: Annotated[
        list[Path] | None,
        typer.Option("--allow-device", help="Default extra mount roots (repeatable)."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file."""
    settings_path = path or get_settings_path()
    if settings_path.exists() and not force:
        print_warning(f"Settings file already exists: {settings_path} (use --force)")
        raise typer.Exit(code=1)

    settings = ScopeSettings(
        scope_symlinks=str(scope_symlinks.absolute()) if scope_symlinks else None,
        one_file_system=one_file_system,
        allowed_devices=[str(p.absolute()) for p in allow_device or []],
    )

    try:
        saved = save_settings(settings, settings_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
