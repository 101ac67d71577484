"""Config command implementation.

Shows the effective configuration or writes a default config file.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from isosync.cli.types import load_settings
from isosync.core.config import ConfigError, IsosyncConfig, save_config
from isosync.core.paths import ensure_config_dir, get_config_path
from isosync.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Show or initialize the configuration.",
    invoke_without_command=True,
)


def _format_value(value: object) -> str:
    """Format a config value for table display."""
    if isinstance(value, list | tuple):
        return ", ".join(str(v) for v in value) or "-"
    return str(value)


def _create_config_table(data: dict[str, object]) -> Table:
    """Create a table of config keys and values."""
    table = Table(
        title="Effective Configuration",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Key", style="info", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, _format_value(value))
    return table


@app.callback(invoke_without_command=True)
def config_callback(
    ctx: typer.Context,
    init: Annotated[
        bool,
        typer.Option(
            "--init",
            help="Write a config file with default settings.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file (with --init).",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show the effective configuration.

    Settings are read from ~/.config/isosync/config.toml (or
    $XDG_CONFIG_HOME/isosync/config.toml); missing keys use defaults.

    Examples:
        isosync config                 # Show effective settings
        isosync config --init          # Write a default config file
        isosync config --init --force  # Overwrite an existing config file
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config_path = get_config_path()

    if init:
        if config_path.exists():
            if not force:
                print_error(f"Config already exists: {config_path}")
                print_info("Use --force to overwrite.")
                raise typer.Exit(code=1)
            print_warning(f"Overwriting existing config: {config_path}")
        try:
            ensure_config_dir()
            saved = save_config(IsosyncConfig(), config_path)
        except (RuntimeError, ConfigError) as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_success(f"Config written: {saved}")
        return

    config = load_settings()
    data = config.model_dump(mode="json")

    if json_output:
        console.print_json(json.dumps(data))
        return

    console.print(_create_config_table(data))
    source = str(config_path) if config_path.exists() else "defaults (no config file)"
    console.print(f"\n[muted]Source: {escape(source)}[/muted]")
