"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from isosync.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_volume_table(title: str = "Candidate Roots") -> Table:
    """Create a pre-configured table for displaying candidate roots.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for volume display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("#", width=3, justify="right")
    table.add_column("Volume", no_wrap=True)
    table.add_column("Base", style="muted")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Used", style="info", justify="right")
    table.add_column("Listed", justify="right")
    table.add_column("Found", justify="right")
    return table


def format_size(num_bytes: int | None) -> str:
    """Format a byte count as GiB with one decimal, or '-' if unknown."""
    if num_bytes is None:
        return "-"
    return f"{num_bytes / 1024**3:.1f} GB"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
