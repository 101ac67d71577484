"""Unit tests for sync command.

Tests for the interactive reconciliation menu, the volume picker and
write outcomes.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from isosync.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def mount_config(isolated_config: Path, tmp_path: Path) -> Path:
    """Write a config whose mount roots point at tmp_path/mnt."""
    mnt = tmp_path / "mnt"
    mnt.mkdir()
    path = isolated_config / "isosync" / "config.toml"
    path.parent.mkdir(parents=True)
    path.write_text(f"mount_roots = [{str(mnt)!r}]\n")
    return mnt


class TestSyncHelp:
    """Tests for sync command help."""

    def test_sync_help_shows_flags(self) -> None:
        """Sync help shows all available flags."""
        result = runner.invoke(app, ["sync", "--help"])
        assert result.exit_code == 0
        assert "--yes" in result.stdout
        assert "--list" in result.stdout
        assert "--color" in result.stdout


class TestSyncMenu:
    """Tests for the decision menu."""

    def test_write(self, sample_root: Path, sample_text: str) -> None:
        """W writes, backs up nothing new and reports success."""
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="w\n")
        assert result.exit_code == 0
        assert "[W] Write these changes to Installed.txt" in result.stdout
        assert "Changes written to" in result.stdout
        assert (sample_root / "Installed.txt").read_text() == sample_text

    def test_quit(self, sample_root: Path) -> None:
        """Q leaves the manifest untouched."""
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="q\n")
        assert result.exit_code == 0
        assert "Aborted. No changes written." in result.stdout
        assert not (sample_root / "Installed.txt").exists()

    def test_view_then_quit(self, sample_root: Path) -> None:
        """V prints the full proposed manifest and shows the menu again."""
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="v\nq\n")
        assert result.exit_code == 0
        assert "----- Proposed Installed.txt -----" in result.stdout
        assert result.stdout.count("Select an option:") == 2

    def test_removals_and_details(self, sample_root: Path) -> None:
        """P previews removals and D shows scan details."""
        (sample_root / "Installed.txt").write_text("B.iso\nnotes\n")
        result = runner.invoke(
            app, ["sync", str(sample_root), "--no-color"], input="p\nd\nq\n"
        )
        assert result.exit_code == 0
        assert "notes [non-iso]" in result.stdout
        assert "----- Scan Details -----" in result.stdout
        assert (sample_root / "Installed.txt").read_text() == "B.iso\nnotes\n"

    def test_rescan(self, sample_root: Path) -> None:
        """R re-runs the dry run."""
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="r\nq\n")
        assert result.exit_code == 0
        assert result.stdout.count("Proposed changes to Installed.txt:") == 2

    def test_unrecognized_choice(self, sample_root: Path) -> None:
        """Unknown keys re-prompt."""
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="x\nq\n")
        assert result.exit_code == 0
        assert "Unrecognized choice." in result.output

    def test_backup_made_on_rewrite(self, sample_root: Path) -> None:
        """Rewriting an existing manifest leaves a timestamped backup."""
        (sample_root / "Installed.txt").write_text("old.iso\n")
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"], input="w\n")
        assert result.exit_code == 0
        backups = list(sample_root.glob("Installed.txt.bak.*"))
        assert len(backups) == 1
        assert backups[0].read_text() == "old.iso\n"

    def test_in_sync(self, sample_root: Path, sample_text: str) -> None:
        """An up-to-date manifest skips the menu."""
        (sample_root / "Installed.txt").write_text(sample_text)
        result = runner.invoke(app, ["sync", str(sample_root), "--no-color"])
        assert result.exit_code == 0
        assert "No changes needed. Installed.txt is up to date." in result.stdout
        assert "Select an option:" not in result.stdout

    def test_color_prompt(self, sample_root: Path) -> None:
        """Without a color flag the user is asked."""
        result = runner.invoke(app, ["sync", str(sample_root)], input="n\nq\n")
        assert result.exit_code == 0
        assert "Show colorized diff?" in result.stdout
        assert "\x1b[" not in result.stdout.split("Legend:")[1].split("Select an option:")[0]


class TestSyncYes:
    """Tests for non-interactive writes."""

    def test_yes_writes_without_prompt(self, sample_root: Path, sample_text: str) -> None:
        """--yes writes immediately."""
        result = runner.invoke(app, ["sync", str(sample_root), "--yes", "--no-color"])
        assert result.exit_code == 0
        assert "Select an option:" not in result.stdout
        assert (sample_root / "Installed.txt").read_text() == sample_text

    def test_permission_denied(self, sample_root: Path) -> None:
        """A failed pre-check exits 1 and writes nothing."""
        with patch("isosync.core.writer.os.access", return_value=False):
            result = runner.invoke(app, ["sync", str(sample_root), "-y", "--no-color"])
        assert result.exit_code == 1
        assert "Directory not writable" in result.output
        assert not (sample_root / "Installed.txt").exists()

    def test_verification_failed(self, sample_root: Path) -> None:
        """A read-back mismatch exits 1."""
        with patch("isosync.core.writer._read_back", return_value=b"junk"):
            result = runner.invoke(app, ["sync", str(sample_root), "-y", "--no-color"])
        assert result.exit_code == 1
        assert "verification failed" in result.output

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root exits 1."""
        result = runner.invoke(app, ["sync", str(tmp_path / "missing"), "-y"])
        assert result.exit_code == 1
        assert "Root directory not found" in result.output


class TestVolumePicker:
    """Tests for choosing a root when none is given."""

    def test_pick_numbered_volume(self, mount_config: Path) -> None:
        """A numbered choice selects the volume's YUMI folder."""
        base = mount_config / "usb" / "YUMI"
        base.mkdir(parents=True)
        (base / "a.iso").write_bytes(b"")

        result = runner.invoke(app, ["sync", "--no-color"], input="1\nw\n")

        assert result.exit_code == 0
        assert (base / "Installed.txt").read_text() == "a.iso\n"

    def test_manual_path(self, mount_config: Path, tmp_path: Path) -> None:
        """M accepts a path typed by the user."""
        volume = tmp_path / "manual"
        volume.mkdir()
        (volume / "x.iso").write_bytes(b"")

        result = runner.invoke(app, ["sync", "--no-color"], input=f"m\n{volume}\nw\n")

        assert result.exit_code == 0
        assert (volume / "Installed.txt").read_text() == "x.iso\n"

    def test_quit_picker(self, mount_config: Path) -> None:
        """Q at the picker exits cleanly."""
        result = runner.invoke(app, ["sync", "--no-color"], input="q\n")
        assert result.exit_code == 0
        assert "Aborted." in result.stdout

    def test_invalid_choice(self, mount_config: Path) -> None:
        """Out-of-range numbers re-prompt."""
        result = runner.invoke(app, ["sync", "--no-color"], input="9\nq\n")
        assert result.exit_code == 0
        assert "Invalid choice." in result.output

    def test_no_volumes_warns(self, mount_config: Path) -> None:
        """An empty mount root is reported before the prompt."""
        result = runner.invoke(app, ["sync", "--no-color"], input="q\n")
        assert "No user volumes found" in result.output
