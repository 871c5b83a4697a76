"""Colorized console output for emr-spark commands.

Thin wrapper around :mod:`rich` that degrades gracefully when stdout
is not a TTY (e.g. piped, CI, cron).  All user-facing status messages
should flow through this module; ``logger.*`` calls are kept for
diagnostics under ``--debug``.
"""

from __future__ import annotations

import sys
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Shared console; force_terminal=None lets Rich detect the TTY.
console = Console(stderr=False, force_terminal=None)

# ── Symbols ────────────────────────────────────────────────────────────────

_PASS = "[bold green]✓[/]"
_WARN = "[bold yellow]⚠[/]"
_ARROW = "[bold cyan]›[/]"
_DOT = "[dim]·[/]"

# ── Status lines ───────────────────────────────────────────────────────────


def ok(msg: str) -> None:
    console.print(f"  {_PASS} {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"  {_WARN} [yellow]{escape(msg)}[/]")


def step(msg: str) -> None:
    """Cyan arrow + action message (in-progress)."""
    console.print(f"  {_ARROW} {escape(msg)}")


def info(msg: str) -> None:
    console.print(f"  {_DOT} [dim]{escape(msg)}[/]")


def error_msg(msg: str) -> None:
    """Bold red error message (not indented)."""
    console.print(f"[bold red]ERROR:[/] {escape(msg)}")


# ── Tables / panels ────────────────────────────────────────────────────────


def cluster_table(clusters: Iterable) -> None:
    """Render ``ClusterHandle``-like objects (id, name, status) as a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Status")
    for c in clusters:
        table.add_row(escape(c.id), escape(c.name), escape(c.status))
    console.print(table)


def error_panel(title: str, body: str) -> None:
    """Red-bordered error panel."""
    console.print()
    console.print(
        Panel(
            escape(body),
            title=f"[bold red]{escape(title)}[/]",
            border_style="red",
            padding=(1, 2),
        )
    )


# ── Progress helpers ───────────────────────────────────────────────────────


def elapsed_str(seconds: float) -> str:
    """Format seconds as ``Xm Ys``."""
    m, s = divmod(int(seconds), 60)
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


def progress_line(msg: str) -> None:
    """Overwrite-friendly single-line progress (for polling loops).

    When stdout is a TTY, uses ``\\r`` to overwrite the line.
    Otherwise falls back to normal print.
    """
    if sys.stdout.isatty():
        console.print(f"  {_ARROW} {escape(msg)}", end="\r", highlight=False)
    else:
        console.print(f"  {_ARROW} {escape(msg)}", highlight=False)


def clear_progress() -> None:
    """Clear a progress_line (TTY only)."""
    if sys.stdout.isatty():
        console.print(" " * console.width, end="\r")
