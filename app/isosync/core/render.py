"""Text rendering of diff results.

Two views are supported, both driven by the addition and removal sets
of a DiffResult:

- UNIFIED: ``---``/``+++`` labels followed by ``@@`` hunks with context.
- LIST: a flat list of ``-`` removals followed by ``+`` additions.

Styled output is produced with a themed Rich console and returned as
ANSI-escaped text.
"""

import difflib
import io
from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.text import Text

from isosync.core.diff import DiffResult, RemovalEntry
from isosync.core.theme import get_theme

DEFAULT_LABELS: tuple[str, str] = ("Installed.txt (current)", "Installed.txt (proposed)")


class RenderMode(str, Enum):
    """Available diff views."""

    UNIFIED = "unified"
    LIST = "list"


class LineKind(str, Enum):
    """Role of a line in a rendered diff, valued by its prefix."""

    CONTEXT = " "
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A line positioned in both texts.

    Attributes:
        kind: Context, added or removed.
        text: Line content.
        old_no: 1-based line number in the old text, if the line is there.
        new_no: 1-based line number in the new text, if the line is there.
    """

    kind: LineKind
    text: str
    old_no: int | None
    new_no: int | None

    @property
    def is_change(self) -> bool:
        return self.kind != LineKind.CONTEXT


def annotate_lines(result: DiffResult) -> list[DiffLine]:
    """Align old and new lines and mark set members as changes.

    Alignment comes from difflib; only lines in ``result.removals`` are
    marked removed and only lines in ``result.additions`` are marked
    added. A line that merely moved is shown once, as context, at its
    new position.

    Args:
        result: The diff to annotate.

    Returns:
        Lines in display order.
    """
    old, new = result.old_lines, result.new_lines
    matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
    lines: list[DiffLine] = []

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for offset in range(i2 - i1):
                lines.append(
                    DiffLine(LineKind.CONTEXT, old[i1 + offset], i1 + offset + 1, j1 + offset + 1)
                )
            continue
        for i in range(i1, i2):
            if old[i] in result.removals:
                lines.append(DiffLine(LineKind.REMOVED, old[i], i + 1, None))
        for j in range(j1, j2):
            kind = LineKind.ADDED if new[j] in result.additions else LineKind.CONTEXT
            lines.append(DiffLine(kind, new[j], None, j + 1))

    return lines


def _hunk_ranges(lines: list[DiffLine], context: int) -> list[tuple[int, int]]:
    """Compute [start, end) index ranges of hunks around changed lines."""
    ranges: list[tuple[int, int]] = []
    for index, line in enumerate(lines):
        if not line.is_change:
            continue
        start = max(0, index - context)
        end = min(len(lines), index + context + 1)
        if ranges and start <= ranges[-1][1]:
            ranges[-1] = (ranges[-1][0], max(ranges[-1][1], end))
        else:
            ranges.append((start, end))
    return ranges


def _hunk_header(lines: list[DiffLine], start: int, end: int) -> str:
    """Format an ``@@ -a,b +c,d @@`` header for lines[start:end]."""
    hunk = lines[start:end]
    old_nos = [ln.old_no for ln in hunk if ln.old_no is not None]
    new_nos = [ln.new_no for ln in hunk if ln.new_no is not None]

    def _span(numbers: list[int], attr: str) -> str:
        if numbers:
            return f"{numbers[0]},{len(numbers)}"
        # Empty side: position of the last preceding line, per unified convention
        before = [getattr(ln, attr) for ln in lines[:start] if getattr(ln, attr) is not None]
        return f"{before[-1] if before else 0},0"

    return f"@@ -{_span(old_nos, 'old_no')} +{_span(new_nos, 'new_no')} @@"


def unified_lines(
    result: DiffResult,
    *,
    context: int = 3,
    labels: tuple[str, str] = DEFAULT_LABELS,
) -> list[tuple[str, str | None]]:
    """Build the unified view as (text, style) pairs.

    Args:
        result: The diff to render.
        context: Context lines around each change.
        labels: Labels for the old and new side.

    Returns:
        Lines with their theme style name (None for plain context).
    """
    if result.is_empty:
        return []

    annotated = annotate_lines(result)
    out: list[tuple[str, str | None]] = [
        (f"--- {labels[0]}", "label"),
        (f"+++ {labels[1]}", "label"),
    ]
    styles = {LineKind.ADDED: "added", LineKind.REMOVED: "removed", LineKind.CONTEXT: None}
    for start, end in _hunk_ranges(annotated, context):
        out.append((_hunk_header(annotated, start, end), "hunk"))
        for line in annotated[start:end]:
            out.append((f"{line.kind.value}{line.text}", styles[line.kind]))
    return out


def list_lines(result: DiffResult) -> list[tuple[str, str | None]]:
    """Build the flat view: removals first, then additions."""
    out: list[tuple[str, str | None]] = [(f"-{line}", "removed") for line in result.removed_lines]
    out.extend((f"+{line}", "added") for line in result.added_lines)
    return out


def _to_text(lines: list[tuple[str, str | None]], style: bool) -> str:
    """Join (text, style) pairs, emitting ANSI styling if requested."""
    if not lines:
        return ""
    if not style:
        return "\n".join(text for text, _ in lines) + "\n"

    console, buffer = _capture_console()
    for text, style_name in lines:
        console.print(Text(text, style=style_name or ""))
    return buffer.getvalue()


def _capture_console() -> tuple[Console, io.StringIO]:
    """Create a themed console that writes ANSI output into a buffer."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        theme=get_theme(),
        force_terminal=True,
        color_system="truecolor",
        highlight=False,
        soft_wrap=True,
        width=1000,
    )
    return console, buffer


def render_diff(
    result: DiffResult,
    *,
    style: bool = False,
    mode: RenderMode = RenderMode.UNIFIED,
    context: int = 3,
    labels: tuple[str, str] = DEFAULT_LABELS,
) -> str:
    """Render a diff result as text.

    Args:
        result: The diff to render.
        style: Emit ANSI color styling.
        mode: UNIFIED hunks or a flat LIST.
        context: Context lines for the unified view.
        labels: Labels for the old and new side of the unified view.

    Returns:
        Rendered text ending with a newline, or "(no differences)".
    """
    if result.is_empty:
        return _to_text([("(no differences)", "muted")], style)
    if mode == RenderMode.LIST:
        return _to_text(list_lines(result), style)
    return _to_text(unified_lines(result, context=context, labels=labels), style)


def render_legend(style: bool = False) -> str:
    """Render the legend explaining diff markers."""
    if not style:
        return "Legend:  - deletion   + addition   @@ hunk@@   ---/+++ labels\n"
    legend = Text()
    legend.append("Legend:", style="bold")
    legend.append("  ")
    legend.append("- deletion", style="removed")
    legend.append("   ")
    legend.append("+ addition", style="added")
    legend.append("   ")
    legend.append("@@ hunk@@", style="hunk")
    legend.append("   ")
    legend.append("---/+++ labels", style="label")

    console, buffer = _capture_console()
    console.print(legend)
    return buffer.getvalue()


def render_removals(
    entries: tuple[RemovalEntry, ...],
    *,
    style: bool = False,
    limit: int = 200,
) -> str:
    """Render the pending-removals preview.

    Args:
        entries: Classified removals.
        style: Emit ANSI color styling.
        limit: Maximum number of entries shown.

    Returns:
        Rendered preview text.
    """
    if not entries:
        return _to_text([("(none)", "muted")], style)

    lines: list[tuple[str, str | None]] = [
        (f"Total lines to be removed: {len(entries)}", None),
        (f"Showing up to first {limit} entries:", "muted"),
    ]
    for entry in entries[:limit]:
        if entry.flag:
            lines.append((f"{entry.line} {entry.flag}", "flagged"))
        else:
            lines.append((entry.line, "removed"))
    if len(entries) > limit:
        lines.append(("... (more not shown)", "muted"))
    return _to_text(lines, style)
