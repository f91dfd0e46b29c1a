"""Single-path check commands.

Ask the backup or restore scope guard about one path, as a quick way to
troubleshoot why a walk included or skipped it.
"""

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from scopectl.cli.display import create_rejections_table, format_decision
from scopectl.scope.backup import reject_symlinks_outside_scope
from scopectl.scope.diagnostics import RejectionCollector
from scopectl.scope.errors import ScopeError
from scopectl.scope.models import CandidateEntry, FileKind
from scopectl.scope.restore import symlink_scope_node_filter
from scopectl.utils.formatting import console, print_error

app = typer.Typer(
    help="Check a single path against a scope.",
    no_args_is_help=True,
)


@app.command()
def backup(
    path: Annotated[
        Path,
        typer.Argument(help="Path as a backup walker would see it."),
    ],
    scope: Annotated[
        Path,
        typer.Option("--scope", "-s", help="Scope directory."),
    ],
) -> None:
    """Check whether a backup would include PATH."""
    collector = RejectionCollector()
    try:
        reject = reject_symlinks_outside_scope(scope, sink=collector)
    except ScopeError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    item = os.path.abspath(path)
    allowed = not reject(item, None)
    _report(item, allowed, collector)


@app.command(name="restore")
def restore_item(
    item: Annotated[
        Path,
        typer.Argument(help="Destination path of the entry to be created."),
    ],
    scope: Annotated[
        Path,
        typer.Option("--scope", "-s", help="Scope directory."),
    ],
    kind: Annotated[
        FileKind,
        typer.Option("--kind", "-k", help="Kind of the entry.", case_sensitive=False),
    ] = FileKind.REGULAR,
    link_target: Annotated[
        str | None,
        typer.Option("--link-target", "-l", help="Symlink target (with --kind symlink)."),
    ] = None,
) -> None:
    """Check whether a restore would create ITEM."""
    collector = RejectionCollector()
    try:
        allow = symlink_scope_node_filter(scope, sink=collector)
        node = CandidateEntry(path=os.path.abspath(item), kind=kind, link_target=link_target)
    except (ScopeError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    allowed = allow(node.path, node)
    _report(node.path, allowed, collector)


def _report(item: str, allowed: bool, collector: RejectionCollector) -> None:
    """Print the decision and exit non-zero when rejected."""
    console.print(f"{escape(item)}: {format_decision(allowed)}")
    if allowed:
        return

    if len(collector):
        console.print(create_rejections_table(collector.rejections, title="Rejection"))
    raise typer.Exit(code=1)
