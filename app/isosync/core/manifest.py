"""Manifest building and file I/O.

Turns raw scan records into a canonical Manifest and reads the persisted
manifest text that serves as the baseline for diffing.
"""

from pathlib import Path

from isosync.core.config import GroupOrder, IsosyncConfig
from isosync.core.scanner import IsoScanner
from isosync.models.manifest import Group, Manifest
from isosync.models.scan_result import ScanResult


class ManifestError(Exception):
    """Base exception for manifest-related errors."""


class ManifestReadError(ManifestError):
    """Raised when the persisted manifest cannot be read or decoded."""


def build_manifest(
    scan_result: ScanResult,
    group_order: GroupOrder = GroupOrder.SCAN,
) -> Manifest:
    """Group, sort and deduplicate scan records into a Manifest.

    ROOT comes first when it has entries. Subdirectory groups follow in
    the scanner's encounter order, or sorted by name when ``group_order``
    is NAME. Groups without entries are dropped.

    Args:
        scan_result: Output of IsoScanner.scan().
        group_order: Ordering of subdirectory groups.

    Returns:
        Manifest with non-empty, sorted groups.
    """
    root_paths: list[str] = []
    paths_by_group: dict[str, list[str]] = {}
    for record in scan_result.records:
        if record.is_root:
            root_paths.append(record.path)
        else:
            paths_by_group.setdefault(record.group, []).append(record.path)

    names = list(scan_result.group_order)
    # Records for groups the scanner did not announce keep first-seen order
    for name in paths_by_group:
        if name not in names:
            names.append(name)
    if group_order == GroupOrder.NAME:
        names.sort()

    groups: list[Group] = []
    if root_paths:
        groups.append(Group.root(root_paths))
    for name in names:
        paths = paths_by_group.get(name)
        if paths:
            groups.append(Group.from_paths(name, paths))

    return Manifest(groups=tuple(groups))


def build_manifest_from_root(root: Path, config: IsosyncConfig | None = None) -> Manifest:
    """Scan a root directory and build its manifest.

    Args:
        root: Directory to scan.
        config: Optional settings. Defaults are used if None.

    Returns:
        Freshly built Manifest.

    Raises:
        RootNotFoundError: If root does not exist.
        ScanError: If root cannot be listed.
    """
    config = config or IsosyncConfig()
    scan_result = IsoScanner(config).scan(root)
    return build_manifest(scan_result, config.group_order)


def manifest_path(root: Path, manifest_name: str | None = None) -> Path:
    """Get the manifest file path inside a root.

    Args:
        root: Scanned root directory.
        manifest_name: File name. Defaults to the configured default.

    Returns:
        Path to the manifest file.
    """
    return root / (manifest_name or IsosyncConfig().manifest_name)


def read_manifest_text(path: Path) -> str:
    """Read the persisted manifest text.

    A missing file is treated as an empty manifest.

    Args:
        path: Manifest file path.

    Returns:
        The file content as text.

    Raises:
        ManifestReadError: If the file exists but cannot be read or decoded.
    """
    if not path.exists():
        return ""
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestReadError(f"Manifest is not valid UTF-8: {path}") from e
    except OSError as e:
        raise ManifestReadError(f"Failed to read manifest {path}: {e}") from e
