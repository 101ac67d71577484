"""CLI package for isosync.

This package contains the Typer application and all subcommands.
"""

from isosync.cli.main import app

__all__ = ["app"]
