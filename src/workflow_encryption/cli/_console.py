"""Rich console singleton and output helpers."""

import json as json_mod
import sys
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

# Status to stderr so it doesn't pollute piped JSON output
console = Console(stderr=True)


def print_ok(msg: str) -> None:
    """Print a success message to stderr."""
    console.print(f"[green]✓[/green] {msg}")


def print_err(msg: str) -> None:
    """Print an error message to stderr."""
    console.print(f"[red]✗[/red] {msg}")


def write_json(data: Any) -> None:
    """Write ``data`` as JSON to stdout (pipeable to jq)."""
    sys.stdout.write(json_mod.dumps(data, ensure_ascii=False, indent=2) + "\n")


def output_table(rows: list, *, ctx: typer.Context, title: str = "", columns: list = None) -> None:
    """Print rows as JSON array or Rich table."""
    if ctx.obj.get("json"):
        write_json(rows)
        return

    if not rows:
        console.print("[dim]No data[/dim]")
        return

    cols = columns or list(rows[0].keys())
    table = Table(title=title, show_lines=False)
    for col in cols:
        table.add_column(col)
    for row in rows:
        table.add_row(*[str(row.get(c, "")) for c in cols])
    console.print(table)
