"""Scan result models.

Raw scanner output before it is grouped into a manifest.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class ScanRecord:
    """A matching file found during a scan.

    Attributes:
        group: ROOT or the top-level directory the file lives under.
        path: Backslash-separated path relative to the scanned root.
        is_root: True for files directly under the root. A top-level
            directory that happens to be named ROOT is not the root.
    """

    group: str
    path: str
    is_root: bool = False


@dataclass(frozen=True, slots=True)
class ScanIssue:
    """A subtree that could not be read (non-fatal).

    Attributes:
        path: Directory that failed to list.
        error: Error message from the operating system.
    """

    path: str
    error: str


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Complete output of one scan pass.

    Attributes:
        root: The scanned root directory.
        records: Matching files in encounter order.
        group_order: Top-level directory names in encounter order,
            including directories without matches.
        issues: Unreadable subtrees skipped during the scan.
    """

    root: Path
    records: tuple[ScanRecord, ...] = ()
    group_order: tuple[str, ...] = ()
    issues: tuple[ScanIssue, ...] = ()

    @property
    def is_partial(self) -> bool:
        """Check if any subtree was skipped."""
        return bool(self.issues)

    @property
    def match_count(self) -> int:
        """Number of matching files found."""
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "root": str(self.root),
            "matches": self.match_count,
            "issues": [{"path": i.path, "error": i.error} for i in self.issues],
        }
