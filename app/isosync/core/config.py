"""Configuration model and TOML I/O for isosync.

Configuration is stored in ~/.config/isosync/config.toml. Every field
has a default, so a missing file simply means "use the defaults".
"""

import os
import tomllib
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from isosync.core.paths import get_config_path

DEFAULT_MANIFEST_NAME = "Installed.txt"
DEFAULT_BASE_FOLDER = "YUMI"

# Top-level directory names never scanned as groups (hidden names are
# skipped separately)
RESERVED_DIR_NAMES: tuple[str, ...] = (
    ".Trashes",
    ".Spotlight-V100",
    ".fseventsd",
    ".TemporaryItems",
    ".DocumentRevisions-V100",
    "$RECYCLE.BIN",
    "System Volume Information",
    "lost+found",
)


class GroupOrder(str, Enum):
    """Ordering of subdirectory groups in the manifest.

    Attributes:
        SCAN: Directory-listing (encounter) order of the filesystem.
        NAME: Ordinal sort by directory name, identical on every platform.
    """

    SCAN = "scan"
    NAME = "name"


class BackupPolicy(str, Enum):
    """What to do when backing up the existing manifest fails.

    Attributes:
        BEST_EFFORT: Log a warning and write anyway.
        REQUIRED: Abort the write and leave the manifest untouched.
    """

    BEST_EFFORT = "best_effort"
    REQUIRED = "required"


class ColorMode(str, Enum):
    """Presentation preference for rendered diffs."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


class IsosyncConfig(BaseModel):
    """Settings for scanning, diffing and writing manifests.

    Attributes:
        manifest_name: File name of the manifest inside the scanned root.
        extension: Extension a file must carry to be listed.
        excluded_suffixes: Suffixes that disqualify an otherwise matching file.
        excluded_dirs: Extra top-level directory names to skip.
        group_order: Ordering of subdirectory groups.
        backup_policy: Backup failure handling before a write.
        color: Whether rendered diffs are styled.
        context_lines: Context lines around each unified-diff hunk.
        base_folder: Folder inside a mounted volume that usually holds ISOs.
        mount_roots: Explicit mount roots for volume discovery.
    """

    model_config = ConfigDict(extra="forbid")

    manifest_name: Annotated[
        str,
        Field(min_length=1, description="Manifest file name inside the root"),
    ] = DEFAULT_MANIFEST_NAME
    extension: Annotated[
        str,
        Field(description="Matching file extension (case-insensitive)"),
    ] = ".iso"
    excluded_suffixes: Annotated[
        tuple[str, ...],
        Field(description="Suffixes excluded even if the extension matches"),
    ] = (".iso.zip",)
    excluded_dirs: Annotated[
        tuple[str, ...],
        Field(description="Additional top-level directory names to skip"),
    ] = ()
    group_order: GroupOrder = GroupOrder.SCAN
    backup_policy: BackupPolicy = BackupPolicy.BEST_EFFORT
    color: ColorMode = ColorMode.AUTO
    context_lines: Annotated[
        int,
        Field(ge=0, le=50, description="Unified diff context lines (0-50)"),
    ] = 3
    base_folder: str = DEFAULT_BASE_FOLDER
    mount_roots: tuple[str, ...] = ()

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Require a dotted extension such as '.iso'."""
        ext = v.strip()
        if not ext.startswith(".") or len(ext) < 2:
            msg = f"extension must start with '.', got '{v}'"
            raise ValueError(msg)
        return ext

    @field_validator("manifest_name")
    @classmethod
    def validate_manifest_name(cls, v: str) -> str:
        """Reject names that would point outside the scanned root."""
        if "/" in v or "\\" in v:
            msg = f"manifest_name must be a plain file name, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def skipped_dir_names(self) -> frozenset[str]:
        """All top-level directory names excluded from scanning."""
        return frozenset(RESERVED_DIR_NAMES) | frozenset(self.excluded_dirs)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> IsosyncConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated IsosyncConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return IsosyncConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def get_config(path: Path | None = None) -> IsosyncConfig:
    """Load configuration, falling back to defaults when no file exists.

    Args:
        path: Optional config file path.

    Returns:
        Loaded or default IsosyncConfig.

    Raises:
        ConfigParseError: If an existing file is not valid TOML.
        ConfigError: If an existing file has invalid content.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return IsosyncConfig()


def save_config(config: IsosyncConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Destination path. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
