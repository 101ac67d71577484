"""Unit tests for configuration.

Tests for the IsosyncConfig model and TOML load/save.
"""

import tomllib
from pathlib import Path

import pytest
from isosync.core.config import (
    BackupPolicy,
    ColorMode,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    GroupOrder,
    IsosyncConfig,
    get_config,
    load_config,
    save_config,
)
from pydantic import ValidationError


class TestIsosyncConfig:
    """Tests for IsosyncConfig model."""

    def test_defaults(self) -> None:
        """Defaults match the YUMI layout."""
        config = IsosyncConfig()
        assert config.manifest_name == "Installed.txt"
        assert config.extension == ".iso"
        assert config.excluded_suffixes == (".iso.zip",)
        assert config.group_order == GroupOrder.SCAN
        assert config.backup_policy == BackupPolicy.BEST_EFFORT
        assert config.color == ColorMode.AUTO
        assert config.context_lines == 3
        assert config.base_folder == "YUMI"

    def test_extension_requires_dot(self) -> None:
        """An extension without a leading dot is rejected."""
        with pytest.raises(ValidationError, match="must start with"):
            IsosyncConfig(extension="iso")

    def test_manifest_name_must_be_plain(self) -> None:
        """A manifest name cannot contain path separators."""
        with pytest.raises(ValidationError, match="plain file name"):
            IsosyncConfig(manifest_name="../Installed.txt")

    def test_context_lines_bounds(self) -> None:
        """context_lines must be between 0 and 50."""
        with pytest.raises(ValidationError):
            IsosyncConfig(context_lines=-1)
        with pytest.raises(ValidationError):
            IsosyncConfig(context_lines=51)

    def test_unknown_keys_rejected(self) -> None:
        """Unknown settings are an error."""
        with pytest.raises(ValidationError):
            IsosyncConfig.model_validate({"colour": "auto"})

    def test_skipped_dir_names(self) -> None:
        """Configured exclusions extend the reserved names."""
        config = IsosyncConfig(excluded_dirs=("Archive",))
        assert "Archive" in config.skipped_dir_names
        assert "$RECYCLE.BIN" in config.skipped_dir_names


class TestLoadConfig:
    """Tests for load_config and get_config."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """load_config raises for a missing file."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "config.toml")

    def test_get_config_defaults(self, tmp_path: Path) -> None:
        """get_config falls back to defaults."""
        assert get_config(tmp_path / "config.toml") == IsosyncConfig()

    def test_load_values(self, tmp_path: Path) -> None:
        """Values from TOML are validated into the model."""
        path = tmp_path / "config.toml"
        path.write_text(
            'group_order = "name"\nbackup_policy = "required"\ncolor = "never"\n'
            'excluded_dirs = ["Archive"]\n'
        )
        config = load_config(path)
        assert config.group_order == GroupOrder.NAME
        assert config.backup_policy == BackupPolicy.REQUIRED
        assert config.color == ColorMode.NEVER
        assert config.excluded_dirs == ("Archive",)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("group_order = \n")
        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text('group_order = "random"\n')
        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)

    def test_default_path_from_xdg(self, isolated_config: Path) -> None:
        """Without a path the XDG config location is used."""
        path = isolated_config / "isosync" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("context_lines = 7\n")
        assert get_config().context_lines == 7


class TestSaveConfig:
    """Tests for save_config."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """A saved config loads back equal."""
        config = IsosyncConfig(group_order=GroupOrder.NAME, mount_roots=("/mnt",))
        path = save_config(config, tmp_path / "nested" / "config.toml")
        assert load_config(path) == config

    def test_writes_plain_values(self, tmp_path: Path) -> None:
        """Enums are stored as their string values."""
        path = save_config(IsosyncConfig(), tmp_path / "config.toml")
        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert data["group_order"] == "scan"
        assert data["manifest_name"] == "Installed.txt"
