"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory for every test."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def make_tree() -> Callable[[Path, list[str]], Path]:
    """Create empty files (and their parent folders) under a root."""

    def _make(root: Path, files: list[str]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for name in files:
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"")
        return root

    return _make


@pytest.fixture
def sample_root(tmp_path: Path, make_tree: Callable[[Path, list[str]], Path]) -> Path:
    """A YUMI folder with two root ISOs, one grouped ISO and a zipped ISO."""
    return make_tree(
        tmp_path / "usb" / "YUMI",
        ["a.iso", "B.iso", "Linux/ubuntu.iso", "Linux/Ubuntu.ISO.ZIP"],
    )


@pytest.fixture
def sample_text() -> str:
    """Proposed manifest text for the sample_root tree."""
    return "B.iso\na.iso\n\nLinux\\ubuntu.iso\n"
