"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from isosync import __version__
from isosync.cli.commands import config, diff, removals, scan, sync, volumes
from isosync.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="isosync",
    help="Keep an ISO manifest in sync with the files on disk.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"isosync version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route library log records to stderr through Rich."""
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress warnings; only errors are logged.",
        ),
    ] = False,
) -> None:
    """isosync - Keep an ISO manifest in sync with the files on disk.

    Scans a boot-volume folder for ISO images and reconciles the
    Installed.txt manifest with what it finds.
    """
    configure_logging(verbose, quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands. Commands taking a ROOT argument are plain commands
# so that options may follow the argument.
app.command(name="volumes")(volumes.list_volumes)
app.command(name="scan")(scan.scan_root)
app.command(name="diff")(diff.diff_manifest)
app.command(name="removals")(removals.show_removals)
app.command(name="sync")(sync.sync_manifest)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
