"""Manifest data models.

A manifest is the persisted text listing of matching files under a root,
grouped by top-level directory. This module defines its in-memory form
and the canonical text serialization.

Serialized layout::

    B.iso
    a.iso

    Linux\\ubuntu.iso

Each group's entries are sorted ordinally, groups are separated by one
blank line, and the text ends with exactly one newline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Synthetic group name for files directly under the scanned root
ROOT_GROUP = "ROOT"

# Path separator used in manifest entries regardless of host convention
ENTRY_SEPARATOR = "\\"


@dataclass(frozen=True, slots=True, order=True)
class FileEntry:
    """A matching file, relative to the scanned root.

    Attributes:
        path: Backslash-separated relative path (e.g. "Linux\\ubuntu.iso").
    """

    path: str

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Entry path cannot be empty"
            raise ValueError(msg)
        if "/" in self.path:
            msg = f"Entry path must use backslash separators: {self.path!r}"
            raise ValueError(msg)
        if "\n" in self.path or "\r" in self.path:
            msg = f"Entry path cannot contain line breaks: {self.path!r}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """File name without the directory part."""
        return self.path.rsplit(ENTRY_SEPARATOR, 1)[-1]


@dataclass(frozen=True, slots=True)
class Group:
    """A named block of entries: ROOT or one top-level subdirectory.

    Attributes:
        name: Group name.
        entries: Unique entries in ordinal order.
        is_root: True for the synthetic group of files directly under the
            root, as opposed to a subdirectory that may share its name.
    """

    name: str
    entries: tuple[FileEntry, ...]
    is_root: bool = False

    def __post_init__(self) -> None:
        """Validate that entries are unique and ordinally sorted."""
        if not self.name:
            msg = "Group name cannot be empty"
            raise ValueError(msg)
        paths = [e.path for e in self.entries]
        if paths != sorted(set(paths)):
            msg = f"Entries of group {self.name!r} must be unique and sorted"
            raise ValueError(msg)

    @classmethod
    def from_paths(
        cls,
        name: str,
        paths: list[str] | tuple[str, ...],
        *,
        is_root: bool = False,
    ) -> Group:
        """Create a group from raw paths, sorting and removing duplicates.

        Python compares str by code point, which matches the byte order
        of their UTF-8 encoding, so uppercase sorts before lowercase.
        """
        entries = tuple(FileEntry(p) for p in sorted(set(paths)))
        return cls(name=name, entries=entries, is_root=is_root)

    @classmethod
    def root(cls, paths: list[str] | tuple[str, ...]) -> Group:
        """Create the synthetic ROOT group."""
        return cls.from_paths(ROOT_GROUP, paths, is_root=True)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class Manifest:
    """Ordered collection of non-empty groups.

    Attributes:
        groups: Groups with ROOT first (if present), then subdirectories.
    """

    groups: tuple[Group, ...] = ()

    def __post_init__(self) -> None:
        """Validate group invariants after initialization."""
        seen: set[tuple[str, bool]] = set()
        for index, group in enumerate(self.groups):
            if not group.entries:
                msg = f"Manifest cannot contain empty group {group.name!r}"
                raise ValueError(msg)
            if (group.name, group.is_root) in seen:
                msg = f"Duplicate group {group.name!r}"
                raise ValueError(msg)
            if group.is_root and index != 0:
                msg = "ROOT group must come first"
                raise ValueError(msg)
            seen.add((group.name, group.is_root))

    @property
    def is_empty(self) -> bool:
        """Check if the manifest lists no files."""
        return not self.groups

    @property
    def entry_count(self) -> int:
        """Total number of entries across all groups."""
        return sum(len(g) for g in self.groups)

    @property
    def group_names(self) -> tuple[str, ...]:
        """Names of all groups in manifest order."""
        return tuple(g.name for g in self.groups)

    def get_group(self, name: str) -> Group | None:
        """Look up a group by name."""
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def lines(self) -> list[str]:
        """Return the serialized lines, including blank group separators."""
        result: list[str] = []
        for group in self.groups:
            if result:
                result.append("")
            result.extend(e.path for e in group.entries)
        return result

    def to_text(self) -> str:
        """Serialize to the canonical manifest text.

        An empty manifest serializes to the empty string; otherwise the
        text ends with exactly one newline.
        """
        lines = self.lines()
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def to_bytes(self) -> bytes:
        """Serialize to UTF-8 bytes as persisted on disk."""
        return self.to_text().encode("utf-8")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "groups": [
                {"name": g.name, "root": g.is_root, "entries": [e.path for e in g.entries]}
                for g in self.groups
            ],
            "summary": {"groups": len(self.groups), "entries": self.entry_count},
        }
