"""Unit tests for scan command.

Tests for the CLI scan command implementation.
"""

import json
from pathlib import Path

from isosync.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestScanCommandHelp:
    """Tests for scan command help."""

    def test_scan_help(self) -> None:
        """Scan command shows help with its options."""
        result = runner.invoke(app, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--json" in result.stdout
        assert "--details" in result.stdout


class TestScanCommand:
    """Tests for scan command output."""

    def test_prints_proposed_manifest(self, sample_root: Path, sample_text: str) -> None:
        """The proposed manifest is printed between rulers."""
        result = runner.invoke(app, ["scan", str(sample_root)])
        assert result.exit_code == 0
        assert "----- Proposed Installed.txt -----" in result.stdout
        assert sample_text in result.stdout
        assert "3 file(s) in 2 group(s)" in result.stdout

    def test_folder_named_root(self, sample_root: Path) -> None:
        """A top-level ROOT folder is listed as its own group."""
        (sample_root / "ROOT").mkdir()
        (sample_root / "ROOT" / "x.iso").write_bytes(b"")

        result = runner.invoke(app, ["scan", str(sample_root), "--json"])

        assert result.exit_code == 0
        groups = json.loads(result.stdout)["manifest"]["groups"]
        assert (groups[0]["name"], groups[0]["root"]) == ("ROOT", True)
        assert sorted((g["name"], g["root"]) for g in groups[1:]) == [
            ("Linux", False),
            ("ROOT", False),
        ]

    def test_does_not_write(self, sample_root: Path) -> None:
        """Scanning never creates the manifest."""
        runner.invoke(app, ["scan", str(sample_root)])
        assert not (sample_root / "Installed.txt").exists()

    def test_json_output(self, sample_root: Path) -> None:
        """--json prints scan details and the grouped manifest."""
        result = runner.invoke(app, ["scan", str(sample_root), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["scan"]["matches"] == 3
        assert data["manifest"]["groups"][0] == {
            "name": "ROOT",
            "root": True,
            "entries": ["B.iso", "a.iso"],
        }

    def test_details(self, sample_root: Path) -> None:
        """--details lists matches and line counts."""
        (sample_root / "Installed.txt").write_text("a.iso\n")
        result = runner.invoke(app, ["scan", str(sample_root), "--details"])
        assert result.exit_code == 0
        assert "----- Scan Details -----" in result.stdout
        assert "- Linux\\ubuntu.iso" in result.stdout
        assert "Current manifest line count: 1" in result.stdout
        assert "Proposed manifest line count: 3" in result.stdout

    def test_nothing_found(self, tmp_path: Path) -> None:
        """An empty root reports that nothing matched."""
        result = runner.invoke(app, ["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No .iso files found" in result.stdout

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root is an error."""
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Root directory not found" in result.output
