"""Scan command implementation.

Scans a root directory and prints the manifest that would be written.
"""

import json
from typing import Annotated

import typer

from isosync.cli.display import print_manifest, print_scan_details, print_scan_issues
from isosync.cli.types import RootArgument, load_settings, resolve_root
from isosync.core.manifest import (
    ManifestReadError,
    build_manifest,
    manifest_path,
    read_manifest_text,
)
from isosync.core.scanner import IsoScanner, RootNotFoundError, ScanError
from isosync.utils.formatting import console, print_error, print_info


def scan_root(
    root: RootArgument = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
    details: Annotated[
        bool,
        typer.Option(
            "--details",
            "-d",
            help="Show matched files and line counts instead of the manifest.",
        ),
    ] = False,
) -> None:
    """Scan ROOT and print the proposed manifest.

    Nothing is written. Use 'isosync sync' to update the manifest.

    Examples:
        isosync scan /media/usb/YUMI            # Print the proposed manifest
        isosync scan /media/usb/YUMI --details  # Show what was matched
        isosync scan /media/usb/YUMI --json     # JSON output for scripting
    """
    config = load_settings()
    resolved = resolve_root(root, config)

    try:
        scan_result = IsoScanner(config).scan(resolved)
    except RootNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except ScanError as e:
        print_error(f"Scan failed: {e}")
        raise typer.Exit(code=1) from e

    manifest = build_manifest(scan_result, config.group_order)

    if json_output:
        data = {"scan": scan_result.to_dict(), "manifest": manifest.to_dict()}
        console.print_json(json.dumps(data))
        return

    print_scan_issues(scan_result)

    if details:
        path = manifest_path(resolved, config.manifest_name)
        try:
            current_text = read_manifest_text(path)
        except ManifestReadError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_scan_details(resolved, path, scan_result, current_text, manifest)
        return

    if manifest.is_empty:
        print_info(f"No {config.extension} files found under {resolved}.")
        return

    print_manifest(manifest, config.manifest_name)
    console.print(
        f"\n[muted]{manifest.entry_count} file(s) in {len(manifest.groups)} group(s)[/muted]"
    )
