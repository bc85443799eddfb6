"""Shared Rich console for CLI output."""

import json
import os
from functools import wraps

from rich.console import Console
from rich.table import Table

_console = Console()
_error_console = Console(stderr=True)


def _should_print() -> bool:
    """Check if console output is enabled."""
    return os.environ.get("CLOUDSTACK_CONSOLE_ENABLED", "true").lower() == "true"


def _console_output(func):
    """Decorator to check if console output is enabled."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        if _should_print():
            return func(*args, **kwargs)

    return wrapper


@_console_output
def print_success(message: str):
    """Print success message."""
    _console.print(f"[green]{message}[/green]")


@_console_output
def print_error(message: str):
    """Print error message to stderr."""
    _error_console.print(f"[red]{message}[/red]")


@_console_output
def print_warning(message: str):
    """Print warning message."""
    _error_console.print(f"[yellow]{message}[/yellow]")


@_console_output
def print_table(title: str, columns, rows):
    """Print rows as a table."""
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    _console.print(table)


def print_json(data: dict):
    """Print JSON data (always outputs, ignores CLOUDSTACK_CONSOLE_ENABLED)."""
    print(json.dumps(data, indent=2, default=str))
