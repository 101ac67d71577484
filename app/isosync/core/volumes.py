"""Candidate root discovery for mounted volumes.

Each platform lists mounted volumes differently; a VolumeProvider
implementation exposes them through one interface. resolve_base() then
picks the directory to reconcile inside a volume: either the volume
itself or its base folder (``YUMI`` by default).
"""

import logging
import os
import shutil
import string
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from isosync.core.config import IsosyncConfig
from isosync.core.manifest import ManifestReadError, manifest_path, read_manifest_text
from isosync.core.scanner import IsoScanner

logger = logging.getLogger(__name__)


class VolumeProvider(ABC):
    """Lists mounted volumes that may hold a manifest.

    Example:
        >>> provider = get_volume_provider()
        >>> for mount in provider.list_mounts():
        ...     print(mount)
    """

    @property
    @abstractmethod
    def mount_roots(self) -> tuple[Path, ...]:
        """Directories whose children are mounted volumes."""

    def list_mounts(self) -> list[Path]:
        """List visible volume directories under the mount roots.

        Hidden entries are skipped; unreadable mount roots are logged
        and skipped.

        Returns:
            Volume paths in listing order.
        """
        mounts: list[Path] = []
        for root in self.mount_roots:
            if not root.is_dir():
                continue
            try:
                children = sorted(root.iterdir())
            except OSError as e:
                logger.warning("Cannot list mount root %s: %s", root, e)
                continue
            for child in children:
                if child.name.startswith("."):
                    continue
                try:
                    if child.is_dir():
                        mounts.append(child)
                except OSError:
                    continue
        return mounts


class DirectoryVolumeProvider(VolumeProvider):
    """Volumes under an explicit list of mount roots.

    Args:
        roots: Mount root directories.
    """

    def __init__(self, roots: tuple[Path, ...]) -> None:
        self._roots = roots

    @property
    def mount_roots(self) -> tuple[Path, ...]:
        return self._roots


class MacVolumeProvider(VolumeProvider):
    """Volumes mounted under /Volumes."""

    @property
    def mount_roots(self) -> tuple[Path, ...]:
        return (Path("/Volumes"),)


class LinuxVolumeProvider(VolumeProvider):
    """Volumes mounted under /media and /run/media/<user>.

    The invoking user is taken from SUDO_USER first so that the right
    media directory is found when running under sudo.
    """

    @property
    def mount_roots(self) -> tuple[Path, ...]:
        roots: list[Path] = [Path("/media")]
        for var in ("SUDO_USER", "USER"):
            user = os.environ.get(var)
            if user:
                candidate = Path("/run/media") / user
                if candidate not in roots:
                    roots.append(candidate)
        return tuple(roots)


class WindowsVolumeProvider(VolumeProvider):
    """Drive letters that currently exist."""

    @property
    def mount_roots(self) -> tuple[Path, ...]:
        return ()

    def list_mounts(self) -> list[Path]:
        return [
            Path(f"{letter}:\\")
            for letter in string.ascii_uppercase
            if Path(f"{letter}:\\").exists()
        ]


def get_volume_provider(config: IsosyncConfig | None = None) -> VolumeProvider:
    """Get the volume provider for the current platform.

    Configured mount roots take precedence over platform defaults.

    Args:
        config: Optional settings.

    Returns:
        A VolumeProvider instance.
    """
    if config is not None and config.mount_roots:
        return DirectoryVolumeProvider(tuple(Path(r) for r in config.mount_roots))
    if sys.platform == "darwin":
        return MacVolumeProvider()
    if sys.platform == "win32":
        return WindowsVolumeProvider()
    return LinuxVolumeProvider()


def resolve_base(mount: Path, config: IsosyncConfig | None = None) -> Path:
    """Pick the directory to reconcile inside a mounted volume.

    Selection rules, in order:

    1. The base folder if it holds matching files.
    2. The volume itself if it holds matching files.
    3. Whichever side alone holds a manifest file.
    4. The base folder if it exists, else the volume itself.

    Args:
        mount: Mounted volume path.
        config: Settings providing the base folder and manifest name.

    Returns:
        Directory to use as the scan root.
    """
    config = config or IsosyncConfig()
    scanner = IsoScanner(config)
    base = mount / config.base_folder

    if base.is_dir() and scanner.count_matches(base) > 0:
        return base
    if scanner.count_matches(mount) > 0:
        return mount

    base_has_manifest = manifest_path(base, config.manifest_name).is_file()
    mount_has_manifest = manifest_path(mount, config.manifest_name).is_file()
    if base_has_manifest and not mount_has_manifest:
        return base
    if mount_has_manifest and not base_has_manifest:
        return mount

    return base if base.is_dir() else mount


@dataclass(frozen=True, slots=True)
class CandidateRoot:
    """A mounted volume with the root chosen inside it.

    Attributes:
        mount: Mounted volume path.
        base: Directory to reconcile.
        total_bytes: Volume capacity, if known.
        used_percent: Percentage of capacity in use, if known.
        listed_count: Non-empty lines in the persisted manifest.
        found_count: Matching files found under base.
    """

    mount: Path
    base: Path
    total_bytes: int | None
    used_percent: int | None
    listed_count: int
    found_count: int

    @property
    def uses_base_folder(self) -> bool:
        """Check if the root is a folder inside the volume."""
        return self.base != self.mount


def describe_mount(mount: Path, config: IsosyncConfig | None = None) -> CandidateRoot:
    """Collect display details for a mounted volume.

    Args:
        mount: Mounted volume path.
        config: Optional settings.

    Returns:
        CandidateRoot with capacity and counts.
    """
    config = config or IsosyncConfig()
    base = resolve_base(mount, config)

    total: int | None = None
    used_pct: int | None = None
    try:
        usage = shutil.disk_usage(mount)
        total = usage.total
        used_pct = round(usage.used * 100 / usage.total) if usage.total else 0
    except OSError as e:
        logger.debug("Cannot read disk usage for %s: %s", mount, e)

    try:
        text = read_manifest_text(manifest_path(base, config.manifest_name))
    except ManifestReadError:
        text = ""
    listed = sum(1 for line in text.splitlines() if line.strip())

    return CandidateRoot(
        mount=mount,
        base=base,
        total_bytes=total,
        used_percent=used_pct,
        listed_count=listed,
        found_count=IsoScanner(config).count_matches(base),
    )


def list_candidates(config: IsosyncConfig | None = None) -> list[CandidateRoot]:
    """Describe every mounted volume of the current platform."""
    provider = get_volume_provider(config)
    return [describe_mount(mount, config) for mount in provider.list_mounts()]
