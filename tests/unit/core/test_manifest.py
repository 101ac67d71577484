"""Unit tests for manifest building and reading.

Tests for build_manifest, build_manifest_from_root and read_manifest_text.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from isosync.core.config import GroupOrder, IsosyncConfig
from isosync.core.manifest import (
    ManifestReadError,
    build_manifest,
    build_manifest_from_root,
    manifest_path,
    read_manifest_text,
)
from isosync.models.manifest import ROOT_GROUP
from isosync.models.scan_result import ScanRecord, ScanResult

MakeTree = Callable[[Path, list[str]], Path]


class TestBuildManifest:
    """Tests for build_manifest."""

    def test_sample_tree(self, sample_root: Path, sample_text: str) -> None:
        """Zipped ISOs are excluded and ROOT sorts ordinally."""
        manifest = build_manifest_from_root(sample_root)
        assert manifest.to_text() == sample_text

    def test_idempotent(self, sample_root: Path) -> None:
        """Building twice from an unchanged tree yields identical bytes."""
        first = build_manifest_from_root(sample_root).to_bytes()
        second = build_manifest_from_root(sample_root).to_bytes()
        assert first == second

    def test_root_first_then_scan_order(self) -> None:
        """ROOT leads; other groups keep the scanner's order."""
        result = ScanResult(
            root=Path("/r"),
            records=(
                ScanRecord("Zeta", "Zeta\\z.iso"),
                ScanRecord("Alpha", "Alpha\\a.iso"),
                ScanRecord(ROOT_GROUP, "r.iso", is_root=True),
            ),
            group_order=("Zeta", "Alpha"),
        )
        manifest = build_manifest(result)
        assert manifest.group_names == ("ROOT", "Zeta", "Alpha")

    def test_name_order(self) -> None:
        """GroupOrder.NAME sorts subdirectory groups by name."""
        result = ScanResult(
            root=Path("/r"),
            records=(ScanRecord("Zeta", "Zeta\\z.iso"), ScanRecord("Alpha", "Alpha\\a.iso")),
            group_order=("Zeta", "Alpha"),
        )
        manifest = build_manifest(result, GroupOrder.NAME)
        assert manifest.group_names == ("Alpha", "Zeta")

    def test_empty_groups_dropped(self) -> None:
        """Groups without records produce no block and no blank line."""
        result = ScanResult(
            root=Path("/r"),
            records=(ScanRecord(ROOT_GROUP, "a.iso", is_root=True),),
            group_order=("Empty",),
        )
        assert build_manifest(result).to_text() == "a.iso\n"

    def test_no_root_files(self) -> None:
        """Without ROOT files the first group starts the text."""
        result = ScanResult(
            root=Path("/r"),
            records=(ScanRecord("Linux", "Linux\\x.iso"),),
            group_order=("Linux",),
        )
        assert build_manifest(result).to_text() == "Linux\\x.iso\n"

    def test_nothing_found(self) -> None:
        """An empty scan yields an empty manifest."""
        manifest = build_manifest(ScanResult(root=Path("/r")))
        assert manifest.is_empty
        assert manifest.to_text() == ""

    def test_entries_sorted_within_group(self, tmp_path: Path, make_tree: MakeTree) -> None:
        """Entries are ordinally sorted inside each group."""
        root = make_tree(tmp_path, ["Linux/b.iso", "Linux/A.iso", "Linux/sub/a.iso"])
        manifest = build_manifest_from_root(root)
        assert manifest.lines() == ["Linux\\A.iso", "Linux\\b.iso", "Linux\\sub\\a.iso"]

    def test_directory_named_root(self, tmp_path: Path, make_tree: MakeTree) -> None:
        """A ROOT folder becomes its own group after the root files."""
        root = make_tree(tmp_path, ["a.iso", "ROOT/x.iso", "Linux/u.iso"])
        manifest = build_manifest_from_root(root, IsosyncConfig(group_order=GroupOrder.NAME))
        assert manifest.to_text() == "a.iso\n\nLinux\\u.iso\n\nROOT\\x.iso\n"

    def test_build_from_root_uses_config(self, tmp_path: Path, make_tree: MakeTree) -> None:
        """Config settings flow into the scan."""
        root = make_tree(tmp_path, ["a.iso", "b.img"])
        config = IsosyncConfig(extension=".img")
        assert build_manifest_from_root(root, config).to_text() == "b.img\n"


class TestManifestPath:
    """Tests for manifest_path."""

    def test_default_name(self, tmp_path: Path) -> None:
        """Defaults to Installed.txt inside the root."""
        assert manifest_path(tmp_path) == tmp_path / "Installed.txt"

    def test_custom_name(self, tmp_path: Path) -> None:
        """A custom manifest name is honored."""
        assert manifest_path(tmp_path, "List.txt") == tmp_path / "List.txt"


class TestReadManifestText:
    """Tests for read_manifest_text."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """A missing manifest reads as empty text."""
        assert read_manifest_text(tmp_path / "Installed.txt") == ""

    def test_reads_text(self, tmp_path: Path) -> None:
        """Existing content is returned unchanged."""
        path = tmp_path / "Installed.txt"
        path.write_bytes(b"a.iso\r\nb.iso\r\n")
        assert read_manifest_text(path) == "a.iso\r\nb.iso\r\n"

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        """Undecodable content raises ManifestReadError."""
        path = tmp_path / "Installed.txt"
        path.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(ManifestReadError, match="UTF-8"):
            read_manifest_text(path)

    def test_directory_in_place_of_file(self, tmp_path: Path) -> None:
        """An unreadable path raises ManifestReadError."""
        path = tmp_path / "Installed.txt"
        path.mkdir()
        with pytest.raises(ManifestReadError, match="Failed to read"):
            read_manifest_text(path)
