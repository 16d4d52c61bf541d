"""Tests for DiffHunkBuilder — hunk dedupe, path tracking, line tagging."""

from tinydiff.git.diff_parser import DiffParser
from tinydiff.git.hunks import DiffHunkBuilder
from tinydiff.git.models import ChangeLine, DiffDelta, HunkHeader, LineKind, LineOrigin


def _build(path, text):
    return DiffHunkBuilder(path).feed_all(DiffParser(text).parse()).build()


DELTA = DiffDelta(old_path="f.txt", new_path="f.txt")
H1 = HunkHeader(1, 3, 1, 4, "@@ -1,3 +1,4 @@")
H2 = HunkHeader(10, 2, 11, 2, "@@ -10,2 +11,2 @@")


def _ctx(text, old, new):
    return ChangeLine(LineOrigin.CONTEXT, text, old, new)


class TestHunkGrouping:
    def test_same_header_repeated_is_one_hunk(self):
        builder = DiffHunkBuilder("f.txt")
        builder.feed(DELTA, H1, ChangeLine(LineOrigin.HUNK_HEADER, H1.header))
        builder.feed(DELTA, H1, _ctx("a", 1, 1))
        builder.feed(DELTA, HunkHeader(1, 3, 1, 4, "@@ -1,3 +1,4 @@ again"), _ctx("b", 2, 2))
        result = builder.build()
        assert len(result.hunks) == 1
        assert [l.text for l in result.hunks[0].lines] == ["a", "b"]

    def test_different_headers_never_merge(self):
        builder = DiffHunkBuilder("f.txt")
        builder.feed(DELTA, H1, _ctx("a", 1, 1))
        builder.feed(DELTA, H2, _ctx("b", 10, 11))
        builder.feed(DELTA, H1, _ctx("c", 2, 2))
        result = builder.build()
        assert [h.range_key for h in result.hunks] == [H1.range_key, H2.range_key, H1.range_key]

    def test_lines_before_any_hunk_are_dropped(self):
        builder = DiffHunkBuilder("f.txt")
        builder.feed(DELTA, None, _ctx("orphan", 1, 1))
        assert builder.build().hunks == []

    def test_header_lines_are_not_content(self):
        builder = DiffHunkBuilder("f.txt")
        builder.feed(DELTA, None, ChangeLine(LineOrigin.FILE_HEADER, "diff --git a/f.txt b/f.txt"))
        builder.feed(DELTA, H1, ChangeLine(LineOrigin.HUNK_HEADER, H1.header))
        result = builder.build()
        assert len(result.hunks) == 1
        assert result.hunks[0].lines == []

    def test_trailing_newline_stripped_from_text(self):
        builder = DiffHunkBuilder("f.txt")
        builder.feed(DELTA, H1, ChangeLine(LineOrigin.ADDITION, "x\n", None, 1))
        assert builder.build().hunks[0].lines[0].text == "x"


class TestLineKinds:
    def test_kinds_and_numbers(self, sample_diff_modified):
        result = _build("app.py", sample_diff_modified)
        assert len(result.hunks) == 2
        first = result.hunks[0].lines
        assert first[1].kind == LineKind.DELETION
        assert first[1].old_line_no == 2 and first[1].new_line_no is None
        assert first[2].kind == LineKind.ADDITION
        assert first[2].old_line_no is None and first[2].new_line_no == 2
        assert first[0].kind == LineKind.CONTEXT
        assert first[0].old_line_no == 1 and first[0].new_line_no == 1

    def test_eof_markers_become_context(self, sample_diff_no_newline):
        lines = _build("data.txt", sample_diff_no_newline).hunks[0].lines
        assert [l.kind for l in lines] == [
            LineKind.CONTEXT,
            LineKind.DELETION,
            LineKind.CONTEXT,
            LineKind.ADDITION,
            LineKind.CONTEXT,
        ]
        assert lines[2].text == "\\ No newline at end of file"


class TestPathTracking:
    def test_rename_records_old_path(self, sample_diff_rename):
        result = _build("new_name.py", sample_diff_rename)
        assert result.path == "new_name.py"
        assert result.old_path == "old_name.py"
        assert len(result.hunks) == 1

    def test_unchanged_path_has_no_old_path(self, sample_diff_modified):
        assert _build("app.py", sample_diff_modified).old_path is None

    def test_deleted_file_uses_old_path(self, sample_diff_deleted):
        result = _build("gone.txt", sample_diff_deleted)
        assert result.path == "gone.txt"
        assert result.old_path is None
        assert all(l.kind == LineKind.DELETION for l in result.hunks[0].lines)

    def test_binary_has_no_hunks(self, sample_diff_binary):
        result = _build("image.png", sample_diff_binary)
        assert result.is_binary is True
        assert result.hunks == []

    def test_binary_flag_is_sticky(self):
        builder = DiffHunkBuilder("f.bin")
        builder.feed(DiffDelta("f.bin", "f.bin", is_binary=True), None,
                     ChangeLine(LineOrigin.FILE_HEADER, ""))
        builder.feed(DiffDelta("f.bin", "f.bin"), H1, _ctx("a", 1, 1))
        result = builder.build()
        assert result.is_binary is True
        assert result.hunks == []

    def test_empty_feed_keeps_requested_path(self):
        result = DiffHunkBuilder("untouched.txt").build()
        assert result.path == "untouched.txt"
        assert result.hunks == []
        assert result.is_binary is False

    def test_deterministic(self, sample_diff_modified):
        assert _build("app.py", sample_diff_modified) == _build("app.py", sample_diff_modified)
