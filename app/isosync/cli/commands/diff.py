"""Diff command implementation.

Dry run: compares the persisted manifest with a fresh scan and shows the
changes a write would make.
"""

import json
from typing import Annotated

import typer

from isosync.cli.display import print_diff, print_diff_summary, print_scan_issues
from isosync.cli.types import ColorOption, RootArgument, load_settings, resolve_root, resolve_style
from isosync.core.diff import compute_diff
from isosync.core.manifest import (
    ManifestReadError,
    build_manifest,
    manifest_path,
    read_manifest_text,
)
from isosync.core.render import RenderMode
from isosync.core.scanner import IsoScanner, RootNotFoundError, ScanError
from isosync.utils.formatting import console, print_error, print_success


def diff_manifest(
    root: RootArgument = None,
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
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
    """Show what a sync would change in the manifest.

    Lines prefixed with '+' would be added, lines prefixed with '-'
    would be removed. Nothing is written.

    Examples:
        isosync diff /media/usb/YUMI            # Unified diff
        isosync diff /media/usb/YUMI --list     # Flat list of changes
        isosync diff /media/usb/YUMI --brief    # Summary counts only
        isosync diff /media/usb/YUMI --json     # JSON output for scripting
    """
    config = load_settings()
    resolved = resolve_root(root, config)
    path = manifest_path(resolved, config.manifest_name)

    try:
        current_text = read_manifest_text(path)
        scan_result = IsoScanner(config).scan(resolved)
    except RootNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except ScanError as e:
        print_error(f"Scan failed: {e}")
        raise typer.Exit(code=1) from e
    except ManifestReadError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    proposed_text = build_manifest(scan_result, config.group_order).to_text()
    result = compute_diff(current_text, proposed_text)
    in_sync = current_text == proposed_text

    # JSON output
    if json_output:
        data = result.to_dict()
        data["in_sync"] = in_sync
        data["partial"] = scan_result.is_partial
        console.print_json(json.dumps(data))
        return

    print_scan_issues(scan_result)

    if in_sync:
        print_success(f"No changes needed. {config.manifest_name} is up to date.")
        return

    # Brief output (summary only)
    if brief:
        console.print(f"[added]Added:[/added] {len(result.additions)}")
        console.print(f"[removed]Removed:[/removed] {len(result.removals)}")
        console.print(f"[muted]Total changes: {result.total_changes}[/muted]")
        return

    style = resolve_style(color, config)
    print_diff(
        result,
        config.manifest_name,
        style=style,
        mode=RenderMode.LIST if list_view else RenderMode.UNIFIED,
        context=config.context_lines,
    )
    print_diff_summary(result)
