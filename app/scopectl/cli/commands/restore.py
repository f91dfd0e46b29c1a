"""Restore command implementation.

Recreates a scanned tree from a snapshot listing under a target
directory, consulting the restore symlink scope filter for every node.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from scopectl.cli.display import create_rejections_table
from scopectl.cli.types import get_settings
from scopectl.core.paths import get_default_snapshot_path
from scopectl.scope.diagnostics import RejectionCollector
from scopectl.scope.errors import ScopeError
from scopectl.scope.models import NodeFilterFn
from scopectl.scope.restore import symlink_scope_node_filter
from scopectl.utils.formatting import console, print_error, print_info, print_success, print_warning
from scopectl.walk.restorer import Restorer, RestoreResult, RestoreStatus
from scopectl.walk.snapshot import SnapshotError, load_snapshot

_STATUS_MARKUP: dict[RestoreStatus, str] = {
    RestoreStatus.RESTORED: "[success]restored[/]",
    RestoreStatus.REJECTED: "[rejected]rejected[/]",
    RestoreStatus.SKIPPED: "[muted]skipped[/]",
    RestoreStatus.FAILED: "[error]failed[/]",
    RestoreStatus.DRY_RUN: "[info]dry-run[/]",
}


def restore(
    ctx: typer.Context,
    target: Annotated[
        Path,
        typer.Option(
            "--target",
            "-t",
            help="Directory to restore into.",
        ),
    ],
    snapshot_path: Annotated[
        Path | None,
        typer.Argument(
            help="Snapshot JSON file (default: the one written by 'scopectl scan --save').",
        ),
    ] = None,
    scope_symlinks: Annotated[
        Path | None,
        typer.Option(
            "--scope-symlinks",
            "-s",
            help="Only restore entries that stay inside this directory.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be restored."),
    ] = False,
) -> None:
    """Restore a snapshot listing, skipping entries that escape the scope."""
    settings = get_settings(ctx)

    try:
        snapshot = load_snapshot(snapshot_path or get_default_snapshot_path())
    except SnapshotError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    scope = scope_symlinks or settings.scope_symlinks
    collector = RejectionCollector()
    filters: list[NodeFilterFn] = []
    if scope:
        try:
            filters.append(symlink_scope_node_filter(scope, sink=collector))
        except ScopeError as e:
            print_error(str(e))
            raise typer.Exit(code=2) from e

    results = Restorer(target, filters, dry_run=dry_run).restore(snapshot)

    _print_results(results, dry_run)
    if len(collector):
        console.print(create_rejections_table(collector.rejections))
    _print_summary(results, dry_run)

    if any(not r.success for r in results):
        raise typer.Exit(code=1)


# === Private helper functions ===


def _print_results(results: list[RestoreResult], dry_run: bool) -> None:
    """Display restore results."""
    title = "Restore Results (dry-run)" if dry_run else "Restore Results"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Type", width=10)
    table.add_column("Status", width=10)
    table.add_column("Details", style="muted")

    for r in results:
        table.add_row(escape(r.path), r.kind.value, _STATUS_MARKUP[r.status], escape(r.error or ""))

    console.print(table)


def _print_summary(results: list[RestoreResult], dry_run: bool) -> None:
    """Print counts per restore status."""
    counts = {status: sum(1 for r in results if r.status == status) for status in RestoreStatus}

    if dry_run:
        print_info(
            f"Dry-run: {counts[RestoreStatus.DRY_RUN]} entries would be restored, "
            f"{counts[RestoreStatus.REJECTED]} rejected."
        )
    elif counts[RestoreStatus.FAILED]:
        print_warning(
            f"{counts[RestoreStatus.RESTORED]} restored, {counts[RestoreStatus.FAILED]} failed, "
            f"{counts[RestoreStatus.REJECTED]} rejected."
        )
    else:
        print_success(
            f"{counts[RestoreStatus.RESTORED]} restored, "
            f"{counts[RestoreStatus.REJECTED]} rejected, "
            f"{counts[RestoreStatus.SKIPPED]} skipped."
        )
