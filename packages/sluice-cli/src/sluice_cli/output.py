"""Rich console output utilities for sluice-cli.

Colored success/error/warning messages. Respects the NO_COLOR
environment variable and the ``--no-color`` flag.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Pipeline valid")
        ✓ Pipeline valid
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("No node named 'proc9' is declared")
        ✗ No node named 'proc9' is declared
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def print_order(
    order: Sequence[str],
    kinds: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> None:
    """Print the compilation order as a table.

    Args:
        order: Node names in compilation order.
        kinds: Optional node kind by name, shown as an extra column.
        **kwargs: Additional arguments passed to console.print().
    """
    table = Table(title="Compilation order", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Node")
    if kinds is not None:
        table.add_column("Kind")
    for position, name in enumerate(order, start=1):
        row = [str(position), name]
        if kinds is not None:
            row.append(kinds.get(name, ""))
        table.add_row(*row)
    console.print(table, **kwargs)


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console
    console = create_console(no_color=no_color)
