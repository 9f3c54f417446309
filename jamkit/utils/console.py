"""
Console output utilities for jamkit using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or progress output, use :mod:`jamkit.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table: structured CLI output
- Errors go to stderr, everything else to stdout
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

JAM_THEME = Theme(
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
_error_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color(stream: Any) -> bool:
    """Return True if colored output should be enabled for ``stream``."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, OSError, ValueError):
        return False


def _make_console(stream: Any) -> Console:
    use_color = _should_use_color(stream)
    return Console(
        file=stream,
        theme=JAM_THEME,
        no_color=not use_color,
        highlight=use_color,
    )


def _get_console() -> Console:
    """Return a singleton Rich Console writing to stdout."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                _console = _make_console(sys.stdout)
    return _console


def _get_error_console() -> Console:
    """Return a singleton Rich Console writing to stderr."""
    global _error_console

    if _error_console is None:
        with _console_lock:
            if _error_console is None:
                _error_console = _make_console(sys.stderr)
    return _error_console


def reconfigure_console() -> None:
    """Reset the global console instances.

    Needed when environment variables (e.g. NO_COLOR) or the standard
    streams change at runtime.
    """
    global _console, _error_console
    with _console_lock:
        _console = None
        _error_console = None


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(
        f"{prefix} {message}", style="success", markup=False, soft_wrap=True
    )


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message to stderr."""
    _get_error_console().print(
        f"{prefix} {message}", style="error", markup=False, soft_wrap=True
    )


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message to stderr."""
    _get_error_console().print(
        f"{prefix} {message}", style="warning", markup=False, soft_wrap=True
    )


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column style configuration.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(
        title=title,
        caption=caption,
        show_header=True,
        header_style="bold",
    )

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow=config.get("overflow", "fold"),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)
