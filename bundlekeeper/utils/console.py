"""
Rich console output for the bundlekeeper commands.

Status lines (resolved projects, published bundles, failures) and the
resolution and installation tables are printed here. Messages are escaped,
so manifest text and config section names like ``[bundlekeeper]`` print
verbatim. Diagnostics go through :mod:`bundlekeeper.utils.logger` instead.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.markup import escape
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

BUNDLEKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=BUNDLEKEEPER_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Reset the global console instance.

    Useful if environment variables (e.g. NO_COLOR) change at runtime.
    """
    global _console
    with _console_lock:
        _console = None


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(f"{prefix} {escape(message)}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {escape(message)}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {escape(message)}", style="warning")


def print_info(message: str) -> None:
    """Print a neutral progress message."""
    _get_console().print(escape(message), style="info")


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Print resolution or installation rows as a Rich table.

    Columns follow ``headers``, or the keys of the first row. Cell values
    are rendered as markup, which lets status cells carry colour tags from
    :func:`colorize_status`. Nothing is printed for an empty table.
    """
    if not data:
        return

    columns = headers or list(data[0])
    styles = column_styles or {}

    table = Table(title=title, show_header=True, header_style="bold")
    for column in columns:
        table.add_column(column, overflow="fold", **styles.get(column, {}))

    for row in data:
        table.add_row(*(str(row.get(column, "")) for column in columns))

    _get_console().print(table)


def colorize_status(status: str) -> str:
    """Return a Rich-markup colored label for an install outcome."""
    color_map = {
        "installed": "green",
        "uploaded": "green",
        "failed": "red",
    }

    color = color_map.get(status.lower())
    return f"[{color}]{status}[/{color}]" if color else status
