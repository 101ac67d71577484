"""Removals command implementation.

Previews manifest lines whose files are no longer on disk.
"""

import json
from typing import Annotated

import typer

from isosync.cli.display import print_removals, print_scan_issues
from isosync.cli.types import ColorOption, RootArgument, load_settings, resolve_root, resolve_style
from isosync.core.diff import classify_removals, compute_diff
from isosync.core.manifest import (
    ManifestReadError,
    build_manifest,
    manifest_path,
    read_manifest_text,
)
from isosync.core.scanner import IsoScanner, RootNotFoundError, ScanError
from isosync.utils.formatting import console, print_error


def show_removals(
    root: RootArgument = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries shown.",
        ),
    ] = 200,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
    color: ColorOption = None,
) -> None:
    """Preview lines that a sync would remove from the manifest.

    Lines that do not look like ISO files are flagged [non-iso]; they
    are usually hand-written or stale entries.

    Examples:
        isosync removals /media/usb/YUMI             # First 200 removals
        isosync removals /media/usb/YUMI --limit 20  # First 20 removals
    """
    config = load_settings()
    resolved = resolve_root(root, config)

    try:
        current_text = read_manifest_text(manifest_path(resolved, config.manifest_name))
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
    entries = classify_removals(compute_diff(current_text, proposed_text), config.extension)

    if json_output:
        data = {
            "total": len(entries),
            "removals": [e.to_dict() for e in entries[:limit]],
        }
        console.print_json(json.dumps(data))
        return

    print_scan_issues(scan_result)
    style = resolve_style(color, config)
    print_removals(entries, config.manifest_name, style=style, limit=limit)
