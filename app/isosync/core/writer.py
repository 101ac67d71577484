"""Backed-up, verified manifest writes.

A write goes through four steps:

1. Pre-checks: the root directory and any existing manifest must be
   writable, otherwise nothing is touched.
2. Backup of the existing manifest to ``<name>.bak.<YYYYmmdd-HHMMSS>``.
3. Atomic write through a temporary sibling file, flushed and fsynced.
4. Read-back and byte comparison against the intended content.

Failures are reported through WriteResult rather than raised, so the
caller can show the outcome and retry the whole cycle.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile

from isosync.core.config import BackupPolicy, IsosyncConfig
from isosync.core.manifest import manifest_path
from isosync.models.manifest import Manifest

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class WriteStatus(str, Enum):
    """Outcome of a manifest write.

    Attributes:
        VERIFIED: Content written and read back identically.
        VERIFICATION_FAILED: Content written but read back differently.
        WRITE_FAILED: An I/O error occurred during backup or write.
        PERMISSION_DENIED: Pre-write checks failed; nothing was changed.
    """

    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"
    WRITE_FAILED = "write_failed"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Result of writing a manifest.

    Attributes:
        status: Outcome of the write.
        path: Manifest file path.
        backup_path: Backup of the previous manifest, if one was made.
        error: Error message for failed writes.
        backup_error: Warning message if the backup could not be made.
    """

    status: WriteStatus
    path: Path
    backup_path: Path | None = None
    error: str | None = None
    backup_error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the write was verified."""
        return self.status == WriteStatus.VERIFIED

    @property
    def failed(self) -> bool:
        """Check if the write did not succeed."""
        return not self.success


def backup_path_for(path: Path, now: datetime | None = None) -> Path:
    """Get the timestamped backup path for a manifest file.

    Args:
        path: Manifest file path.
        now: Timestamp to use. Defaults to the current local time.

    Returns:
        Sibling path such as ``Installed.txt.bak.20250101-120000``.
    """
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return path.with_name(f"{path.name}.bak.{stamp}")


def check_writable(root: Path, path: Path) -> str | None:
    """Check that the manifest can be written.

    Args:
        root: Directory that holds the manifest.
        path: Manifest file path.

    Returns:
        An error message, or None if both checks pass.
    """
    if not root.is_dir() or not os.access(root, os.W_OK):
        return f"Directory not writable: {root}"
    if path.exists() and not os.access(path, os.W_OK):
        return f"File not writable: {path}"
    return None


def _read_back(path: Path) -> bytes:
    """Read the written file for verification."""
    return path.read_bytes()


def _copy_mode(path: Path, tmp_path: Path) -> None:
    """Give the temporary file the permissions the manifest should keep.

    Temporary files are created owner-only; an existing manifest keeps its
    mode and a new one gets 0644. Filesystems without POSIX modes (FAT,
    exFAT) reject chmod, which is harmless there.
    """
    try:
        if path.exists():
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, 0o644)
    except OSError as e:
        logger.debug("Could not set mode on %s: %s", tmp_path, e)


def _write_atomic(path: Path, data: bytes) -> None:
    """Write data to path via a flushed, fsynced temporary file.

    Raises:
        OSError: If any step fails. The temporary file is removed, also
            when the write is interrupted.
    """
    tmp_path: Path | None = None
    replaced = False
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        _copy_mode(path, tmp_path)
        os.replace(str(tmp_path), str(path))
        replaced = True
    finally:
        if not replaced and tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


def write_manifest(
    root: Path,
    manifest: Manifest,
    *,
    config: IsosyncConfig | None = None,
    now: datetime | None = None,
) -> WriteResult:
    """Back up, write and verify the manifest inside root.

    Args:
        root: Scanned root directory holding the manifest.
        manifest: Manifest to persist.
        config: Settings for the manifest name and backup policy.
        now: Timestamp for the backup name. Defaults to the current time.

    Returns:
        WriteResult describing the outcome.
    """
    config = config or IsosyncConfig()
    path = manifest_path(root, config.manifest_name)
    data = manifest.to_bytes()

    denied = check_writable(root, path)
    if denied:
        logger.error("Pre-write check failed: %s", denied)
        return WriteResult(status=WriteStatus.PERMISSION_DENIED, path=path, error=denied)

    backup: Path | None = None
    backup_error: str | None = None
    if path.exists():
        target = backup_path_for(path, now)
        try:
            shutil.copy2(path, target)
            backup = target
            logger.debug("Backed up %s to %s", path, target)
        except OSError as e:
            backup_error = f"Failed to create backup at {target}: {e}"
            if config.backup_policy == BackupPolicy.REQUIRED:
                logger.error("%s; aborting write", backup_error)
                return WriteResult(
                    status=WriteStatus.WRITE_FAILED,
                    path=path,
                    error=backup_error,
                    backup_error=backup_error,
                )
            logger.warning(backup_error)

    try:
        _write_atomic(path, data)
    except OSError as e:
        logger.error("Failed to write manifest %s: %s", path, e)
        return WriteResult(
            status=WriteStatus.WRITE_FAILED,
            path=path,
            backup_path=backup,
            error=f"Failed to write manifest: {e}",
            backup_error=backup_error,
        )

    try:
        written = _read_back(path)
    except OSError as e:
        return WriteResult(
            status=WriteStatus.WRITE_FAILED,
            path=path,
            backup_path=backup,
            error=f"Failed to read back manifest: {e}",
            backup_error=backup_error,
        )

    if written != data:
        logger.error("Verification failed: %s does not match the intended content", path)
        return WriteResult(
            status=WriteStatus.VERIFICATION_FAILED,
            path=path,
            backup_path=backup,
            error="Written manifest does not match the proposed content",
            backup_error=backup_error,
        )

    return WriteResult(
        status=WriteStatus.VERIFIED,
        path=path,
        backup_path=backup,
        backup_error=backup_error,
    )
