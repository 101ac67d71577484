"""Sync command implementation.

Runs the interactive reconciliation cycle: scan the root, show the
proposed changes to the manifest, then Write / View / Rescan / Preview
removals / Details / Quit.
"""

from typing import Annotated

import typer
from rich.markup import escape

from isosync.cli.display import ConsoleListener
from isosync.cli.types import ColorOption, RootArgument, load_settings, resolve_root, resolve_style
from isosync.core.manifest import ManifestReadError
from isosync.core.reconcile import (
    Command,
    CommandSource,
    Reconciler,
    ReconcileSession,
    ScriptedCommands,
)
from isosync.core.render import RenderMode
from isosync.core.scanner import RootNotFoundError, ScanError
from isosync.utils.formatting import console, print_error

# Menu keys mapped to decisions
MENU_KEYS: dict[str, Command] = {
    "w": Command.WRITE,
    "v": Command.VIEW,
    "r": Command.RESCAN,
    "p": Command.REMOVALS,
    "d": Command.DETAILS,
    "q": Command.QUIT,
}


class PromptCommands(CommandSource):
    """Reads decisions from the terminal menu.

    Args:
        manifest_name: Manifest file name shown in the menu.
    """

    def __init__(self, manifest_name: str) -> None:
        self._manifest_name = manifest_name

    def _print_menu(self) -> None:
        console.print()
        console.print("Select an option:")
        console.print(f"  [info]\\[W][/info] Write these changes to {escape(self._manifest_name)}")
        console.print("  [info]\\[V][/info] View full proposed file")
        console.print("  [info]\\[R][/info] Rescan disk and re-run dry run")
        console.print("  [info]\\[P][/info] Preview pending removals")
        console.print("  [info]\\[D][/info] Debug scan details")
        console.print("  [info]\\[Q][/info] Quit without writing")

    def next_command(self, session: ReconcileSession) -> Command:
        while True:
            self._print_menu()
            choice = typer.prompt("Your choice (W/V/R/P/D/Q)").strip().lower()
            command = MENU_KEYS.get(choice)
            if command is not None:
                return command
            print_error("Unrecognized choice.")


def sync_manifest(
    root: RootArgument = None,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Write the proposed manifest without prompting.",
        ),
    ] = False,
    list_view: Annotated[
        bool,
        typer.Option(
            "--list",
            "-l",
            help="Show a flat list of changes instead of unified hunks.",
        ),
    ] = False,
    color: ColorOption = None,
) -> None:
    """Reconcile the manifest with the files on disk.

    Scans ROOT, shows the proposed changes to the manifest as a dry run,
    then asks what to do:

      [W] Write the changes (backed up and verified)
      [V] View the full proposed manifest
      [R] Rescan the disk and show the diff again
      [P] Preview lines pending removal
      [D] Show scan details
      [Q] Quit without writing

    Examples:
        isosync sync /media/usb/YUMI      # Interactive reconciliation
        isosync sync                      # Pick a mounted volume first
        isosync sync /media/usb/YUMI -y   # Write without prompting
    """
    config = load_settings()
    resolved = resolve_root(root, config)
    style = resolve_style(color, config, ask=not yes)

    commands: CommandSource = (
        ScriptedCommands([Command.WRITE]) if yes else PromptCommands(config.manifest_name)
    )
    listener = ConsoleListener(
        config,
        style=style,
        mode=RenderMode.LIST if list_view else RenderMode.UNIFIED,
    )
    reconciler = Reconciler(resolved, commands, config=config, listener=listener)

    try:
        outcome = reconciler.run()
    except RootNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except ScanError as e:
        print_error(f"Scan failed: {e}")
        raise typer.Exit(code=1) from e
    except ManifestReadError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if outcome.failed:
        raise typer.Exit(code=1)
