# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Console rendering for pass results.

Rich-based output for hosts: a per-pass summary table plus status and
phase lines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.box import ROUNDED
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from opgraph.core import OperationStatus

if TYPE_CHECKING:
    from opgraph.operations.report import ExecutionSummary

__all__ = (
    "DARK_THEME",
    "STATUS_STYLES",
    "get_console",
    "phase",
    "print_summary",
    "render_summary",
    "status",
)

DARK_THEME = Theme(
    {
        "info": "bright_cyan",
        "warning": "bright_yellow",
        "error": "bold bright_red",
        "success": "bold bright_green",
        "muted": "dim",
    }
)

STATUS_STYLES: dict[OperationStatus, str] = {
    OperationStatus.READY: "muted",
    OperationStatus.EXECUTING: "info",
    OperationStatus.SUCCESS: "success",
    OperationStatus.NO_OP: "muted",
    OperationStatus.FAILURE: "error",
    OperationStatus.CANCELLED: "warning",
    OperationStatus.BLOCKED: "warning",
}

_console: Console | None = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console(theme=DARK_THEME)
    return _console


def render_summary(summary: ExecutionSummary, *, show_silent: bool = False) -> Table:
    """Build a table with one row per operation.

    Silent operations are hidden unless they failed or ``show_silent`` is set.
    """
    title = "Pass summary"
    if summary.status is not None:
        title = f"{title}: {summary.status.value}"

    table = Table(title=title, box=ROUNDED, title_justify="left")
    table.add_column("Operation", style="bold")
    table.add_column("Group")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Error", overflow="fold")

    for record in summary.records:
        if record.silent and not show_silent and record.status != OperationStatus.FAILURE:
            continue
        if record.status is None:
            status_text = "-"
        else:
            style = STATUS_STYLES[record.status]
            status_text = f"[{style}]{record.status.value}[/{style}]"
        table.add_row(
            record.name,
            record.group or "",
            status_text,
            f"{record.duration:.3f}s",
            escape(record.error) if record.error else "",
        )

    return table


def print_summary(
    summary: ExecutionSummary,
    *,
    console: Console | None = None,
    show_silent: bool = False,
) -> None:
    console = console or get_console()
    console.print(render_summary(summary, show_silent=show_silent))


def status(msg: str, *, style: str = "info", console: Console | None = None) -> None:
    """Print a status message with Rich styling.

    Args:
        msg: Status message.
        style: Theme style name (info, success, warning, error, muted).
        console: Target console; defaults to the shared one.
    """
    console = console or get_console()
    console.print(f"  [{style}]{msg}[/{style}]")


def phase(title: str, *, console: Console | None = None) -> None:
    """Print a phase header."""
    console = console or get_console()
    console.print(f"\n[bold bright_cyan]=== {title} ===[/bold bright_cyan]")
