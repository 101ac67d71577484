"""Volumes command implementation.

Lists mounted volumes and the root isosync would reconcile on each.
"""

import json
from typing import Annotated

import typer

from isosync.cli.types import load_settings, show_candidates
from isosync.core.volumes import get_volume_provider, list_candidates
from isosync.utils.formatting import console, print_info, print_warning


def list_volumes(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """List mounted volumes that can hold a manifest.

    For each volume the Base column shows whether the YUMI folder or the
    volume itself would be used as the root.

    Examples:
        isosync volumes          # Table of candidate roots
        isosync volumes --json   # JSON output for scripting
    """
    config = load_settings()

    if json_output:
        data = [
            {
                "mount": str(c.mount),
                "base": str(c.base),
                "total_bytes": c.total_bytes,
                "used_percent": c.used_percent,
                "listed": c.listed_count,
                "found": c.found_count,
            }
            for c in list_candidates(config)
        ]
        console.print_json(json.dumps(data))
        return

    if not show_candidates(config):
        roots = ", ".join(str(r) for r in get_volume_provider(config).mount_roots) or "(none)"
        print_warning(f"No user volumes found under: {roots}")
        print_info("Set 'mount_roots' in the config file to search other locations.")
