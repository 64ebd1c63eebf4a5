"""
Rendering functions for multivcs output.

The plain ``list`` output is one line per checkout; this module renders
the same information as a table.
"""

from typing import Iterable

from rich import box
from rich.console import Console
from rich.table import Table

from .domain.checkout import Checkout

console = Console()


def render_checkout_table(checkouts: Iterable[Checkout]) -> None:
    """
    Render checkouts as a table with type, directory, repository and module.

    Args:
        checkouts: Checkouts to show, in order
    """
    rows = [c.to_dict() for c in checkouts]
    if not rows:
        console.print("[yellow]No checkouts found.[/yellow]")
        return

    table = Table(
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Type", style="cyan")
    table.add_column("Directory", style="green")
    table.add_column("Repository")
    table.add_column("Module", style="dim")

    for row in rows:
        table.add_row(
            row['type'],
            row['directory'],
            row['repository'] or "-",
            row['module'] or "-",
        )

    console.print(table)
