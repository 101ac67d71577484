"""Shared display functions for reconciliation output.

Provides the console presentation of diffs, scan details, pending
removals and write results, plus the ReconcileListener used by the
interactive sync command.
"""

from pathlib import Path

import typer
from rich.markup import escape

from isosync.core.config import IsosyncConfig
from isosync.core.diff import DiffResult, RemovalEntry
from isosync.core.reconcile import ReconcileListener, ReconcileSession
from isosync.core.render import RenderMode, render_diff, render_legend, render_removals
from isosync.core.writer import WriteResult, WriteStatus
from isosync.models.manifest import Manifest
from isosync.models.scan_result import ScanResult
from isosync.utils.formatting import console, print_error, print_info, print_success, print_warning

# Maximum number of matches listed in the scan details view
DETAILS_LIMIT = 50


def echo_rendered(text: str, style: bool) -> None:
    """Write pre-rendered (possibly ANSI-styled) text to stdout."""
    typer.echo(text, nl=False, color=style)


def print_diff(
    result: DiffResult,
    manifest_name: str,
    *,
    style: bool,
    mode: RenderMode = RenderMode.UNIFIED,
    context: int = 3,
) -> None:
    """Print the legend and the rendered diff."""
    console.print()
    echo_rendered(render_legend(style), style)
    console.print()
    console.print(f"Proposed changes to {escape(manifest_name)}:")
    labels = (f"{manifest_name} (current)", f"{manifest_name} (proposed)")
    echo_rendered(
        render_diff(result, style=style, mode=mode, context=context, labels=labels),
        style,
    )


def print_diff_summary(result: DiffResult) -> None:
    """Print counts of added and removed lines."""
    parts: list[str] = []
    if result.additions:
        parts.append(f"[added]{len(result.additions)} added[/added]")
    if result.removals:
        parts.append(f"[removed]{len(result.removals)} removed[/removed]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)} ({result.total_changes} total changes)")
    else:
        console.print("\n[muted]No line differences (formatting or order only).[/muted]")


def print_manifest(manifest: Manifest, manifest_name: str) -> None:
    """Print the full proposed manifest between rulers."""
    header = f"----- Proposed {manifest_name} -----"
    console.print(escape(header), highlight=False)
    typer.echo(manifest.to_text(), nl=False)
    console.print("-" * len(header), highlight=False)


def print_removals(
    entries: tuple[RemovalEntry, ...],
    manifest_name: str,
    *,
    style: bool,
    limit: int = 200,
) -> None:
    """Print lines present in the manifest but no longer on disk."""
    console.print()
    console.print(
        f"----- Pending removals (present in {escape(manifest_name)} but not on disk) -----",
        highlight=False,
    )
    echo_rendered(render_removals(entries, style=style, limit=limit), style)


def print_scan_issues(scan_result: ScanResult) -> None:
    """Summarize unreadable subtrees skipped during a scan."""
    if scan_result.issues:
        print_warning(
            f"{len(scan_result.issues)} unreadable path(s) skipped during scan; "
            "the proposed manifest may be incomplete."
        )


def print_scan_details(
    root: Path,
    path: Path,
    scan_result: ScanResult,
    current_text: str,
    manifest: Manifest,
) -> None:
    """Print the scan details view: root, matches and line counts."""
    console.print()
    console.print("----- Scan Details -----", highlight=False)
    console.print(f"Root: {escape(str(root))}", highlight=False)
    console.print(f"Manifest: {escape(str(path))}", highlight=False)
    console.print()
    console.print("Found files under root:")
    for record in scan_result.records[:DETAILS_LIMIT]:
        console.print(f"  - {escape(record.path)}", highlight=False)
    if scan_result.match_count > DETAILS_LIMIT:
        console.print("  [muted]... (more files not shown)[/muted]")
    if not scan_result.records:
        console.print("  [muted](none)[/muted]")
    for issue in scan_result.issues:
        console.print(f"  [warning]skipped[/warning] {escape(issue.path)}: {escape(issue.error)}")
    console.print()
    current_count = sum(1 for line in current_text.splitlines() if line.strip())
    console.print(f"Current manifest line count: {current_count}")
    console.print(f"Proposed manifest line count: {manifest.entry_count}")
    console.print("------------------------", highlight=False)


def print_write_result(result: WriteResult) -> None:
    """Print the outcome of a write."""
    if result.backup_error:
        print_warning(result.backup_error)

    if result.status == WriteStatus.VERIFIED:
        print_success(f"Changes written to {result.path}.")
        if result.backup_path is not None:
            print_info(f"Backup saved: {result.backup_path}")
        return

    if result.status == WriteStatus.PERMISSION_DENIED:
        print_error(result.error or "Permission denied")
        print_info("Check volume permissions or file flags (e.g. read-only or locked files).")
    elif result.status == WriteStatus.VERIFICATION_FAILED:
        print_error(
            f"Write verification failed; {result.path} does not match the proposed content."
        )
        print_info("Inspect permissions or flags on the volume or file.")
    else:
        print_error(result.error or "Write failed")

    if result.backup_path is not None:
        print_info(f"Previous manifest kept at: {result.backup_path}")


class ConsoleListener(ReconcileListener):
    """Presents reconciliation events on the console.

    Args:
        config: Settings for naming and rendering.
        style: Whether diffs are colorized.
        mode: Diff view to render.
    """

    def __init__(
        self,
        config: IsosyncConfig,
        *,
        style: bool,
        mode: RenderMode = RenderMode.UNIFIED,
    ) -> None:
        self._config = config
        self._style = style
        self._mode = mode

    def on_scan(self, session: ReconcileSession) -> None:
        if session.scan_result is not None:
            print_scan_issues(session.scan_result)

    def on_diff(self, session: ReconcileSession) -> None:
        if session.diff is None:
            return
        print_diff(
            session.diff,
            self._config.manifest_name,
            style=self._style,
            mode=self._mode,
            context=self._config.context_lines,
        )

    def on_in_sync(self, session: ReconcileSession) -> None:
        print_success(f"No changes needed. {self._config.manifest_name} is up to date.")

    def on_view(self, session: ReconcileSession) -> None:
        if session.manifest is not None:
            print_manifest(session.manifest, self._config.manifest_name)

    def on_removals(self, session: ReconcileSession, entries: tuple[RemovalEntry, ...]) -> None:
        print_removals(entries, self._config.manifest_name, style=self._style)

    def on_details(self, session: ReconcileSession) -> None:
        if session.scan_result is None or session.manifest is None:
            return
        print_scan_details(
            session.root,
            session.manifest_path,
            session.scan_result,
            session.current_text,
            session.manifest,
        )

    def on_write(self, session: ReconcileSession, result: WriteResult) -> None:
        print_write_result(result)

    def on_quit(self, session: ReconcileSession) -> None:
        print_info("Aborted. No changes written.")
