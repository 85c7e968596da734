"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from reclaim.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Return "truecolor" for interactive terminals, None to let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format a byte count as a human-readable string.

    Args:
        size_bytes: Size in bytes. None and 0 render as "0 B".

    Returns:
        String such as "512 B", "1.5 KB" or "2.0 GB".
    """
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def create_file_table(title: str) -> Table:
    """Create a pre-configured table for listing files.

    Args:
        title: Table title.

    Returns:
        Rich Table with Path, Size, Type and Modified columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", style="file.path", overflow="fold")
    table.add_column("Size", style="size", justify="right", no_wrap=True)
    table.add_column("Type", style="muted", no_wrap=True)
    table.add_column("Modified", style="muted", no_wrap=True)
    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
