"""Unit tests for diff engine.

Tests for line splitting, set-based comparison and removal classification.
"""

from isosync.core.diff import (
    DiffResult,
    RemovalEntry,
    classify_removals,
    compute_diff,
    split_lines,
)


class TestSplitLines:
    """Tests for split_lines."""

    def test_empty_text(self) -> None:
        """Empty text has no lines."""
        assert split_lines("") == ()

    def test_trailing_newline_adds_no_line(self) -> None:
        """A single trailing newline terminates the last line."""
        assert split_lines("a.iso\nb.iso\n") == ("a.iso", "b.iso")

    def test_missing_trailing_newline(self) -> None:
        """Text without a final newline keeps its last line."""
        assert split_lines("a.iso\nb.iso") == ("a.iso", "b.iso")

    def test_blank_lines_kept(self) -> None:
        """Blank separator lines are real lines."""
        assert split_lines("a.iso\n\nL\\b.iso\n") == ("a.iso", "", "L\\b.iso")

    def test_crlf_normalized(self) -> None:
        """Carriage returns are stripped."""
        assert split_lines("a.iso\r\nb.iso\r\n") == ("a.iso", "b.iso")


class TestComputeDiff:
    """Tests for compute_diff."""

    def test_single_addition(self) -> None:
        """One new line is exactly one addition."""
        result = compute_diff("a.iso\n", "a.iso\nb.iso\n")
        assert result.additions == frozenset({"b.iso"})
        assert result.removals == frozenset()
        assert result.total_changes == 1
        assert not result.is_empty

    def test_single_removal(self) -> None:
        """A line only in the old text is a removal."""
        result = compute_diff("a.iso\nold.iso\n", "a.iso\n")
        assert result.removals == frozenset({"old.iso"})
        assert result.additions == frozenset()

    def test_identical_texts(self) -> None:
        """Identical texts produce an empty diff."""
        assert compute_diff("a.iso\n", "a.iso\n").is_empty

    def test_order_does_not_matter(self) -> None:
        """Reordered lines are not differences."""
        assert compute_diff("b.iso\na.iso\n", "a.iso\nb.iso\n").is_empty

    def test_multiplicity_does_not_matter(self) -> None:
        """Duplicate lines collapse in the sets."""
        assert compute_diff("a.iso\na.iso\n", "a.iso\n").is_empty

    def test_crlf_manifest_equals_lf(self) -> None:
        """A CRLF manifest compares equal to its LF form."""
        assert compute_diff("a.iso\r\n", "a.iso\n").is_empty

    def test_blank_separator_is_compared(self) -> None:
        """A separator line disappearing counts as a removal."""
        result = compute_diff("a.iso\n\nL\\b.iso\n", "a.iso\n")
        assert result.removals == frozenset({"", "L\\b.iso"})

    def test_from_empty(self) -> None:
        """Everything is an addition when there is no manifest yet."""
        result = compute_diff("", "a.iso\n\nL\\b.iso\n")
        assert result.additions == frozenset({"a.iso", "", "L\\b.iso"})
        assert result.removals == frozenset()

    def test_ordered_views(self) -> None:
        """added_lines and removed_lines follow text order without repeats."""
        result = compute_diff("z.iso\ny.iso\nz.iso\n", "c.iso\nb.iso\n")
        assert result.removed_lines == ("z.iso", "y.iso")
        assert result.added_lines == ("c.iso", "b.iso")

    def test_to_dict(self) -> None:
        """to_dict reports sync status, counts and lines."""
        data = compute_diff("a.iso\nold.iso\n", "a.iso\nnew.iso\n").to_dict()
        assert data == {
            "in_sync": False,
            "summary": {"added": 1, "removed": 1, "total": 2},
            "added": ["new.iso"],
            "removed": ["old.iso"],
        }


class TestClassifyRemovals:
    """Tests for classify_removals."""

    def test_flags_non_iso_lines(self) -> None:
        """Lines that are not ISO paths are flagged."""
        result = compute_diff("gone.iso\nnotes.txt\n", "")
        entries = classify_removals(result)
        assert entries == (
            RemovalEntry("gone.iso", True),
            RemovalEntry("notes.txt", False),
        )
        assert entries[0].flag is None
        assert entries[1].flag == "[non-iso]"

    def test_case_insensitive_extension(self) -> None:
        """Upper-case extensions still count as entries."""
        entries = classify_removals(compute_diff("OLD.ISO\n", ""))
        assert entries[0].matches_pattern

    def test_blank_lines_skipped(self) -> None:
        """Blank separator removals are not listed."""
        result = DiffResult(additions=frozenset(), removals=frozenset({""}), old_lines=("",))
        assert classify_removals(result) == ()

    def test_custom_extension_flag(self) -> None:
        """The flag names the configured extension."""
        entries = classify_removals(compute_diff("a.iso\n", ""), ".img")
        assert entries[0].flag == "[non-img]"

    def test_to_dict(self) -> None:
        """RemovalEntry serializes line and flag."""
        assert RemovalEntry("x", False).to_dict() == {"line": "x", "flag": "[non-iso]"}
