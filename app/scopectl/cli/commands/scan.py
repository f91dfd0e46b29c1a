"""Scan command implementation.

Walks a source tree the way a backup would, applying the symlink scope
guard and, in one-file-system mode, the device boundary guard.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from scopectl.cli.display import create_rejections_table
from scopectl.cli.types import OutputFormat, get_settings
from scopectl.core.paths import ensure_dir, get_default_snapshot_path, get_state_dir
from scopectl.scope.backup import reject_symlinks_outside_scope
from scopectl.scope.devices import DeviceBoundaryMap, reject_by_device
from scopectl.scope.diagnostics import RejectionCollector
from scopectl.scope.errors import ScopeError
from scopectl.scope.models import RejectFn
from scopectl.utils.formatting import console, print_error, print_info
from scopectl.walk.scanner import BackupScanner, ScannedEntry
from scopectl.walk.snapshot import SnapshotError, save_snapshot


def scan(
    ctx: typer.Context,
    root: Annotated[
        Path,
        typer.Argument(help="Directory to scan."),
    ],
    scope_symlinks: Annotated[
        Path | None,
        typer.Option(
            "--scope-symlinks",
            "-s",
            help="Exclude entries whose symlinks resolve outside this directory.",
        ),
    ] = None,
    one_file_system: Annotated[
        bool,
        typer.Option(
            "--one-file-system",
            "-x",
            help="Do not cross into other devices.",
        ),
    ] = False,
    allow_device: Annotated[
        list[Path] | None,
        typer.Option(
            "--allow-device",
            help="Also allow the device of this mount root (repeatable).",
        ),
    ] = None,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Write the included entries as a snapshot JSON file.",
        ),
    ] = None,
    save: Annotated[
        bool,
        typer.Option(
            "--save",
            help="Write the snapshot to the default state location.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    show_excluded: Annotated[
        bool,
        typer.Option(
            "--show-excluded",
            help="Also list excluded entries and why they were rejected.",
        ),
    ] = False,
) -> None:
    """Scan a tree and report which entries a backup would include."""
    settings = get_settings(ctx)

    if not root.is_dir():
        print_error(f"Not a directory: {root}")
        raise typer.Exit(code=2)

    scope = scope_symlinks or settings.scope_symlinks
    device_roots = [*settings.allowed_devices, *(allow_device or [])]

    collector = RejectionCollector()
    rejects: list[RejectFn] = []
    try:
        if scope:
            rejects.append(reject_symlinks_outside_scope(scope, sink=collector))
        if one_file_system or settings.one_file_system:
            device_map = DeviceBoundaryMap.from_paths([root, *device_roots])
            rejects.append(reject_by_device(device_map, sink=collector))
    except ScopeError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    scanner = BackupScanner(root, rejects)
    entries = list(scanner.scan())
    included = [e for e in entries if not e.excluded]
    excluded = [e for e in entries if e.excluded]

    if export_path is None and save:
        try:
            ensure_dir(get_state_dir(), "state")
        except RuntimeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        export_path = get_default_snapshot_path()

    if export_path is not None:
        try:
            saved = save_snapshot(scanner.build_snapshot(entries), export_path)
        except SnapshotError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_info(f"Snapshot written to {saved}")

    shown = entries if show_excluded else included

    if output_format == OutputFormat.JSON:
        _print_json(shown)
        return

    _print_table(shown)
    if show_excluded and len(collector):
        console.print(create_rejections_table(collector.rejections))

    console.print(f"\n[muted]{len(included)} included, {len(excluded)} excluded[/muted]")


# === Private helper functions ===


def _print_table(entries: list[ScannedEntry]) -> None:
    """Display scanned entries as a Rich table."""
    table = Table(
        title="Scanned Entries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Type", width=10)
    table.add_column("Link Target", style="muted")
    table.add_column("Status", width=10)

    for entry in entries:
        status = "[rejected]excluded[/]" if entry.excluded else "[allowed]included[/]"
        table.add_row(
            escape(entry.path),
            entry.kind.value,
            escape(entry.link_target or "-"),
            status,
        )

    console.print(table)


def _print_json(entries: list[ScannedEntry]) -> None:
    """Display scanned entries as JSON."""
    data = [
        {
            "path": e.path,
            "kind": e.kind.value,
            "link_target": e.link_target,
            "excluded": e.excluded,
            "size": e.size,
        }
        for e in entries
    ]
    console.print_json(json.dumps(data))
