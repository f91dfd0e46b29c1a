"""Shared Rich display functions for guard decisions.

Provides table builders used by the scan, restore and check commands.
"""

from rich.markup import escape
from rich.table import Table

from scopectl.scope.diagnostics import Rejection


def create_rejections_table(rejections: list[Rejection], title: str = "Rejected Entries") -> Table:
    """Create a Rich table listing rejection diagnostics.

    Args:
        rejections: Rejections reported by the guards.
        title: Table title.

    Returns:
        Rich Table with Item, Reason, Target and Boundary columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Item", no_wrap=True)
    table.add_column("Reason", style="rejected")
    table.add_column("Target", style="muted")
    table.add_column("Boundary", style="muted")

    for rejection in rejections:
        table.add_row(
            escape(rejection.item),
            rejection.reason.value,
            escape(rejection.target or "-"),
            escape(rejection.boundary),
        )

    return table


def format_decision(allowed: bool) -> str:
    """Format an allow/reject decision with color markup."""
    if allowed:
        return "[allowed]allowed[/]"
    return "[rejected]rejected[/]"
