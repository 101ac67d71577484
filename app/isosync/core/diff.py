"""Diff engine for comparing persisted and freshly built manifests.

Differences are computed as line sets: a line present in the old text
but not the new one is a removal, and the reverse is an addition. Line
order and multiplicity do not matter for the result; they are kept only
so that renderers can show changes in context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def split_lines(text: str) -> tuple[str, ...]:
    """Split manifest text into lines.

    Carriage returns are stripped so that a manifest edited on Windows
    compares equal to its LF form. A single trailing newline does not
    produce an extra empty line.

    Args:
        text: Manifest text.

    Returns:
        Tuple of lines without line terminators.
    """
    if not text:
        return ()
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return tuple(line.rstrip("\r") for line in lines)


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Result of comparing two manifest texts.

    Attributes:
        additions: Lines in the new text but not the old.
        removals: Lines in the old text but not the new.
        old_lines: Lines of the old text, in order.
        new_lines: Lines of the new text, in order.
    """

    additions: frozenset[str]
    removals: frozenset[str]
    old_lines: tuple[str, ...] = ()
    new_lines: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check if there are no line differences.

        Returns:
            True if no line was added or removed.
        """
        return not (self.additions or self.removals)

    @property
    def total_changes(self) -> int:
        """Total number of differing lines."""
        return len(self.additions) + len(self.removals)

    @property
    def added_lines(self) -> tuple[str, ...]:
        """Additions in the order they appear in the new text."""
        return _ordered(self.new_lines, self.additions)

    @property
    def removed_lines(self) -> tuple[str, ...]:
        """Removals in the order they appear in the old text."""
        return _ordered(self.old_lines, self.removals)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the diff result.
        """
        return {
            "in_sync": self.is_empty,
            "summary": {
                "added": len(self.additions),
                "removed": len(self.removals),
                "total": self.total_changes,
            },
            "added": list(self.added_lines),
            "removed": list(self.removed_lines),
        }


def _ordered(lines: tuple[str, ...], selected: frozenset[str]) -> tuple[str, ...]:
    """Filter lines to the selected set, keeping first occurrences in order."""
    seen: set[str] = set()
    result: list[str] = []
    for line in lines:
        if line in selected and line not in seen:
            seen.add(line)
            result.append(line)
    return tuple(result)


def compute_diff(old_text: str, new_text: str) -> DiffResult:
    """Compare two manifest texts line by line.

    Blank separator lines are compared like any other line.

    Args:
        old_text: Currently persisted manifest.
        new_text: Freshly built manifest.

    Returns:
        DiffResult with addition and removal sets.

    Example:
        >>> result = compute_diff("a.iso\\n", "a.iso\\nb.iso\\n")
        >>> sorted(result.additions), sorted(result.removals)
        (['b.iso'], [])
    """
    old_lines = split_lines(old_text)
    new_lines = split_lines(new_text)
    old_set = frozenset(old_lines)
    new_set = frozenset(new_lines)
    return DiffResult(
        additions=new_set - old_set,
        removals=old_set - new_set,
        old_lines=old_lines,
        new_lines=new_lines,
    )


@dataclass(frozen=True, slots=True)
class RemovalEntry:
    """A line pending removal from the persisted manifest.

    Attributes:
        line: The removed line.
        matches_pattern: Whether the line looks like a matching file.
        extension: Extension used for classification.
    """

    line: str
    matches_pattern: bool
    extension: str = ".iso"

    @property
    def flag(self) -> str | None:
        """Marker for lines that are not file entries, e.g. "[non-iso]"."""
        if self.matches_pattern:
            return None
        return f"[non-{self.extension.lstrip('.').lower()}]"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"line": self.line, "flag": self.flag}


def classify_removals(result: DiffResult, extension: str = ".iso") -> tuple[RemovalEntry, ...]:
    """Classify pending removals by whether they look like file entries.

    A removal that does not end with the extension (case-insensitive)
    usually means the persisted manifest holds a stale or hand-written
    entry. Blank separator lines are not entries and are skipped.

    Args:
        result: Diff to classify.
        extension: Matching file extension.

    Returns:
        Removal entries in old-text order.
    """
    suffix = extension.lower()
    return tuple(
        RemovalEntry(
            line=line,
            matches_pattern=line.lower().endswith(suffix),
            extension=extension,
        )
        for line in result.removed_lines
        if line.strip()
    )
