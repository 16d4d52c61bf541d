"""Tests for context windows and re-anchoring."""

import pytest

from tinydiff.comments.anchors import (
    anchor_for_line,
    build_context_window,
    extract_context_window,
    find_context,
    reanchor,
    split_lines,
)
from tinydiff.comments.models import Comment, OrphanedAnchor, PinnedAnchor, TrackedAnchor

ORIGINAL = "alpha\nbeta\ngamma\n"


def _tracked(line, contents, comment_id="c1"):
    return Comment(
        id=comment_id,
        file_path="f.txt",
        anchor=anchor_for_line(line, contents),
        body="note",
        created_at=1,
        updated_at=1,
    )


class TestContextWindow:
    def test_middle_line(self):
        assert extract_context_window("line1\nline2\nline3\nline4", 2) == "line1\nline2\nline3"

    def test_first_line_has_empty_before(self):
        assert extract_context_window(ORIGINAL, 1) == "\nalpha\nbeta"

    def test_last_line_has_empty_after(self):
        assert extract_context_window(ORIGINAL, 3) == "beta\ngamma\n"

    def test_beyond_end(self):
        assert extract_context_window(ORIGINAL, 10) == "\n\n"

    def test_crlf_lines(self):
        assert extract_context_window("a\r\nb\r\nc\r\n", 2) == "a\nb\nc"

    def test_split_lines_drops_trailing_empty(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\nb") == ["a", "b"]
        assert split_lines("") == []

    def test_build_window_index_zero(self):
        assert build_context_window(["only"], 0) == "\nonly\n"


class TestAnchorForLine:
    def test_tracked_with_contents(self):
        anchor = anchor_for_line(2, ORIGINAL)
        assert anchor == TrackedAnchor(2, "alpha\nbeta\ngamma")

    def test_pinned_without_contents(self):
        assert anchor_for_line(2, None) == PinnedAnchor(2)


class TestReanchor:
    def test_unchanged_file_keeps_line(self):
        comment = _tracked(2, ORIGINAL)
        assert reanchor(comment, ORIGINAL) is comment

    def test_lines_inserted_above(self):
        comment = _tracked(2, ORIGINAL)
        moved = reanchor(comment, "new\nalpha\nbeta\ngamma\n")
        assert moved.anchor == TrackedAnchor(3, "alpha\nbeta\ngamma")
        assert moved.line == 3
        assert comment.line == 2

    def test_commented_line_edited_orphans(self):
        comment = _tracked(2, ORIGINAL)
        orphaned = reanchor(comment, "alpha\nBETA\ngamma\n")
        assert orphaned.anchor == OrphanedAnchor(2, "alpha\nbeta\ngamma")
        assert orphaned.is_orphaned
        assert orphaned.line == 2

    def test_neighbour_edited_orphans(self):
        comment = _tracked(2, ORIGINAL)
        assert reanchor(comment, "alpha\nbeta\nGAMMA\n").is_orphaned

    def test_orphan_recovers_when_window_returns(self):
        comment = _tracked(2, ORIGINAL)
        orphaned = reanchor(comment, "alpha\nBETA\ngamma\n")
        restored = reanchor(orphaned, "x\nalpha\nbeta\ngamma\n")
        assert restored.anchor == TrackedAnchor(3, "alpha\nbeta\ngamma")

    def test_orphan_stays_orphaned(self):
        orphan = Comment("c1", "f.txt", OrphanedAnchor(5, "a\nb\nc"), "note")
        assert reanchor(orphan, "zzz\n") is orphan

    def test_duplicate_windows_pick_first(self):
        comment = _tracked(2, ORIGINAL)
        doubled = "alpha\nbeta\ngamma\nalpha\nbeta\ngamma\n"
        assert reanchor(comment, doubled).line == 2
        assert find_context(doubled, "alpha\nbeta\ngamma") == 2

    @pytest.mark.parametrize("contents", ["", "totally\ndifferent\n", "new\nalpha\nbeta\ngamma\n"])
    def test_pinned_never_moves(self, contents):
        pinned = Comment("p1", "f.txt", PinnedAnchor(2), "note")
        assert reanchor(pinned, contents) is pinned

    def test_reanchor_logs_orphaning(self, caplog):
        comment = _tracked(2, ORIGINAL)
        with caplog.at_level("INFO", logger="tinydiff"):
            reanchor(comment, "nothing\n")
        assert "lost its anchor" in caplog.text
