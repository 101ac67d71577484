"""Shared types and utilities for CLI commands.

This module provides the root resolver, presentation preference and
config loading used by several command modules.
"""

import sys
from pathlib import Path
from typing import Annotated

import typer

from isosync.core.config import ColorMode, ConfigError, IsosyncConfig, get_config
from isosync.core.volumes import describe_mount, get_volume_provider, list_candidates
from isosync.utils.formatting import (
    console,
    create_volume_table,
    format_size,
    print_error,
    print_info,
    print_warning,
)

RootArgument = Annotated[
    Path | None,
    typer.Argument(
        help="Directory to reconcile. Prompts for a mounted volume if omitted.",
        show_default=False,
    ),
]

ColorOption = Annotated[
    bool | None,
    typer.Option(
        "--color/--no-color",
        help="Colorize diff output (default: from config, or terminal detection).",
        show_default=False,
    ),
]


def load_settings() -> IsosyncConfig:
    """Load configuration or exit with a helpful error message.

    Raises:
        typer.Exit: If the config file exists but is invalid.
    """
    try:
        return get_config()
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def require_root(root: Path) -> Path:
    """Validate an explicitly given root directory.

    Raises:
        typer.Exit: If the directory does not exist.
    """
    if not root.is_dir():
        print_error(f"Root directory not found: {root}")
        raise typer.Exit(code=1)
    return root


def show_candidates(config: IsosyncConfig) -> list[Path]:
    """Print the candidate root table and return the chosen bases in order."""
    candidates = list_candidates(config)
    table = create_volume_table()
    for index, candidate in enumerate(candidates, start=1):
        used = f"{candidate.used_percent}%" if candidate.used_percent is not None else "-"
        table.add_row(
            str(index),
            str(candidate.mount),
            config.base_folder if candidate.uses_base_folder else "(root)",
            format_size(candidate.total_bytes),
            used,
            str(candidate.listed_count),
            str(candidate.found_count),
        )
    if candidates:
        console.print(table)
    return [c.base for c in candidates]


def pick_root(config: IsosyncConfig) -> Path:
    """Interactively choose a root from mounted volumes or a manual path.

    Returns:
        The chosen root directory.

    Raises:
        typer.Exit: If the user quits (code 0).
    """
    provider = get_volume_provider(config)
    bases = show_candidates(config)
    if not bases:
        roots = ", ".join(str(r) for r in provider.mount_roots) or "(none)"
        print_warning(f"No user volumes found under: {roots}")
        print_info("You can still enter a path manually.")

    while True:
        console.print("   [info]M[/]) Manual path")
        console.print("   [info]Q[/]) Quit")
        answer = typer.prompt("Enter choice").strip()

        if answer.lower() == "q":
            print_info("Aborted.")
            raise typer.Exit(code=0)

        if answer.lower() == "m":
            manual = Path(typer.prompt("Enter mounted volume path").strip().rstrip("/\\") or "/")
            if not manual.is_dir():
                print_error(f"Volume path not found: {manual}")
                continue
            base = describe_mount(manual, config).base
            print_info(f"Using root: {base}")
            return base

        if answer.isdigit() and 1 <= int(answer) <= len(bases):
            base = bases[int(answer) - 1]
            if base.is_dir():
                print_info(f"Using root: {base}")
                return base
            print_error(f"Folder not found: {base}")
            continue

        print_error("Invalid choice.")


def resolve_root(root: Path | None, config: IsosyncConfig) -> Path:
    """Return the validated root, prompting for a volume if none was given."""
    if root is None:
        return pick_root(config)
    return require_root(root)


def resolve_style(color: bool | None, config: IsosyncConfig, *, ask: bool = False) -> bool:
    """Decide whether diff output is styled.

    Precedence: explicit --color/--no-color, then the config's color
    mode, then (for AUTO) a prompt if ``ask`` is set, else TTY detection.
    """
    if color is not None:
        return color
    if config.color == ColorMode.ALWAYS:
        return True
    if config.color == ColorMode.NEVER:
        return False

    is_tty = sys.stdout.isatty()
    if not ask:
        return is_tty
    prompt = "Show colorized diff?" if is_tty else "Show colorized diff? (output is being piped)"
    return typer.confirm(prompt, default=is_tty)
