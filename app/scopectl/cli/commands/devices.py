"""Devices command implementation.

Shows the device boundary registry built from a set of mount roots, and
optionally checks whether a path may be descended into.
"""

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from scopectl.cli.display import format_decision
from scopectl.scope.devices import DeviceBoundaryMap
from scopectl.scope.errors import ScopeError
from scopectl.utils.formatting import console, print_error


def devices(
    roots: Annotated[
        list[Path],
        typer.Argument(help="Mount roots to register (e.g. the backup root)."),
    ],
    check_paths: Annotated[
        list[Path] | None,
        typer.Option(
            "--check",
            help="Check whether this path's device is allowed (repeatable).",
        ),
    ] = None,
) -> None:
    """Show the device boundaries registered for ROOTS."""
    try:
        device_map = DeviceBoundaryMap.from_paths(roots)
    except ScopeError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    table = Table(
        title="Device Boundaries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Device", justify="right")
    table.add_column("Major:Minor", style="muted", justify="right")

    for path, device_id in device_map:
        table.add_row(escape(path), str(device_id), f"{os.major(device_id)}:{os.minor(device_id)}")

    console.print(table)

    rejected = False
    for check_path in check_paths or []:
        item = os.path.abspath(check_path)
        try:
            device_id = os.lstat(item).st_dev
            allowed = device_map.is_allowed(item, device_id)
        except (OSError, ScopeError) as e:
            print_error(f"Cannot check {item}: {e}")
            raise typer.Exit(code=2) from e

        console.print(f"{escape(item)} (device {device_id}): {format_decision(allowed)}")
        rejected = rejected or not allowed

    if rejected:
        raise typer.Exit(code=1)
