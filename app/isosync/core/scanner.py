"""Scanner for matching files under a root directory.

The scan runs in two passes:

1. ROOT pass: files directly under the root (not recursive).
2. Subdirectory pass: every immediate subdirectory that is not hidden
   or reserved is walked recursively.

Paths are reported relative to the root with backslash separators.
Unreadable subtrees are skipped and recorded as ScanIssue entries.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from isosync.core.config import IsosyncConfig
from isosync.models.manifest import ENTRY_SEPARATOR, ROOT_GROUP
from isosync.models.scan_result import ScanIssue, ScanRecord, ScanResult

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Base exception for scan failures that abort the scan."""


class RootNotFoundError(ScanError):
    """Raised when the scan root does not exist or is not a directory."""


def to_entry_path(path: Path, root: Path) -> str:
    """Render a path relative to root with backslash separators.

    Args:
        path: Path inside root.
        root: The scanned root directory.

    Returns:
        Relative path such as "Linux\\ubuntu.iso".
    """
    return ENTRY_SEPARATOR.join(path.relative_to(root).parts)


class IsoScanner:
    """Enumerates matching files under a root directory.

    Args:
        config: Settings providing the extension, excluded suffixes and
            skipped directory names. Defaults are used if None.

    Example:
        >>> scanner = IsoScanner()
        >>> result = scanner.scan(Path("/media/usb/YUMI"))
        >>> for record in result.records:
        ...     print(record.group, record.path)
    """

    def __init__(self, config: IsosyncConfig | None = None) -> None:
        self._config = config or IsosyncConfig()
        self._extension = self._config.extension.lower()
        self._excluded = tuple(s.lower() for s in self._config.excluded_suffixes)
        self._skipped_dirs = self._config.skipped_dir_names

    def matches(self, name: str) -> bool:
        """Check if a file name matches the extension rule.

        The name must end with the extension (case-insensitive) and must
        not end with any excluded suffix such as ".iso.zip".

        Args:
            name: File name to check.

        Returns:
            True if the file belongs in the manifest.
        """
        lowered = name.lower()
        if not lowered.endswith(self._extension) or lowered == self._extension:
            return False
        return not any(lowered.endswith(suffix) for suffix in self._excluded)

    def is_skipped_dir(self, name: str) -> bool:
        """Check if a top-level directory is excluded from scanning.

        Args:
            name: Directory name.

        Returns:
            True for hidden names and reserved system folders.
        """
        return name.startswith(".") or name in self._skipped_dirs

    def scan(self, root: Path) -> ScanResult:
        """Scan a root directory for matching files.

        Args:
            root: Directory to scan.

        Returns:
            ScanResult with records in encounter order.

        Raises:
            RootNotFoundError: If root does not exist or is not a directory.
            ScanError: If the root itself cannot be listed.
        """
        if not root.is_dir():
            raise RootNotFoundError(f"Root directory not found: {root}")

        try:
            top_level = list(root.iterdir())
        except OSError as e:
            raise ScanError(f"Cannot list root directory {root}: {e}") from e

        records: list[ScanRecord] = []
        group_order: list[str] = []
        issues: list[ScanIssue] = []
        # Directories on the current walk path; the root is always on it
        ancestors: set[tuple[int, int]] = set()
        root_key = self._dir_key(root)
        if root_key is not None:
            ancestors.add(root_key)

        # ROOT pass
        for entry in top_level:
            if self._is_matching_file(entry):
                records.append(
                    ScanRecord(group=ROOT_GROUP, path=to_entry_path(entry, root), is_root=True)
                )

        # Subdirectory pass
        for entry in top_level:
            try:
                if not entry.is_dir():
                    continue
            except OSError as e:
                issues.append(self._issue(entry, e))
                continue
            if self.is_skipped_dir(entry.name):
                logger.debug("Skipping reserved directory: %s", entry)
                continue

            group_order.append(entry.name)
            for path in self._walk(entry, ancestors, issues):
                records.append(ScanRecord(group=entry.name, path=to_entry_path(path, root)))

        return ScanResult(
            root=root,
            records=tuple(records),
            group_order=tuple(group_order),
            issues=tuple(issues),
        )

    def count_matches(self, root: Path) -> int:
        """Count matching files under root, recursively.

        Returns 0 if the root does not exist or cannot be read.
        """
        try:
            return self.scan(root).match_count
        except ScanError:
            return 0

    def _walk(
        self,
        directory: Path,
        ancestors: set[tuple[int, int]],
        issues: list[ScanIssue],
    ) -> Iterator[Path]:
        """Recursively yield matching files below a directory.

        A directory whose identity is already on the current walk path
        is a symlink cycle and is skipped. Directories reached through
        more than one path outside a cycle are walked each time.

        Args:
            directory: Directory to walk.
            ancestors: (st_dev, st_ino) pairs of the directories on the
                current walk path.
            issues: Collector for unreadable subtrees.

        Yields:
            Paths of matching files.
        """
        key = self._dir_key(directory)
        if key is not None:
            if key in ancestors:
                logger.warning("Skipping directory cycle at: %s", directory)
                return
            ancestors.add(key)

        try:
            yield from self._walk_children(directory, ancestors, issues)
        finally:
            if key is not None:
                ancestors.discard(key)

    def _walk_children(
        self,
        directory: Path,
        ancestors: set[tuple[int, int]],
        issues: list[ScanIssue],
    ) -> Iterator[Path]:
        try:
            children = list(directory.iterdir())
        except OSError as e:
            issues.append(self._issue(directory, e))
            return

        for child in children:
            try:
                is_dir = child.is_dir()
            except OSError as e:
                issues.append(self._issue(child, e))
                continue

            if is_dir:
                yield from self._walk(child, ancestors, issues)
            elif self._is_matching_file(child):
                yield child

    def _is_matching_file(self, path: Path) -> bool:
        """Check if path is a regular file whose name matches."""
        if not self.matches(path.name):
            return False
        try:
            return path.is_file()
        except OSError:
            return False

    @staticmethod
    def _dir_key(path: Path) -> tuple[int, int] | None:
        """Get a (device, inode) identity for a directory, following symlinks."""
        try:
            stat = os.stat(path)
        except OSError:
            return None
        # Some filesystems report no inode numbers
        if stat.st_ino == 0:
            return None
        return (stat.st_dev, stat.st_ino)

    @staticmethod
    def _issue(path: Path, error: OSError) -> ScanIssue:
        """Record and log an unreadable path."""
        logger.warning("Skipping unreadable path %s: %s", path, error)
        return ScanIssue(path=str(path), error=error.strerror or str(error))
