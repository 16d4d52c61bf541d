"""Unified diff parser — turns patch text into a (delta, hunk, line) change feed.

The feed mirrors what a diff engine's print callback delivers: one event per
file header, one per hunk header, and one per content line, each carrying
the file delta and the hunk it belongs to. Handles renames, copies,
new/deleted files, mode-only changes, binary markers, omitted hunk counts,
quoted paths, and ``\\ No newline at end of file`` markers.
"""

from __future__ import annotations

import re
from typing import Generator, List, Optional

from tinydiff.git.models import ChangeEvent, ChangeLine, DiffDelta, HunkHeader, LineOrigin

# --- Regex patterns for diff parsing ---

_DIFF_HEADER_RE = re.compile(r"^diff --git (\"?a/.*?\"?) (\"?b/.*\"?)$")
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@"
)
_BINARY_RE = re.compile(r"^Binary files (.*) and (.*) differ$")
_GIT_BINARY_PATCH_RE = re.compile(r"^GIT binary patch$")
_RENAME_FROM_RE = re.compile(r"^(?:rename|copy) from (.+)$")
_RENAME_TO_RE = re.compile(r"^(?:rename|copy) to (.+)$")
_FILE_HEADER_OLD = re.compile(r"^--- (.+)$")
_FILE_HEADER_NEW = re.compile(r"^\+\+\+ (.+)$")
_SIMILARITY_RE = re.compile(r"^(?:dis)?similarity index \d+%$")
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_NEW_MODE_RE = re.compile(r"^new mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_NEW_FILE_RE = re.compile(r"^new file mode \d+$")
_INDEX_RE = re.compile(r"^index [0-9a-f]+\.\.[0-9a-f]+")

_DEV_NULL = "/dev/null"

_EOFNL_FOR = {
    LineOrigin.CONTEXT: LineOrigin.CONTEXT_EOFNL,
    LineOrigin.ADDITION: LineOrigin.ADD_EOFNL,
    LineOrigin.DELETION: LineOrigin.DEL_EOFNL,
}


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of unusual file names."""
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        raw = path[1:-1].encode("utf-8").decode("unicode_escape")
        return raw.encode("latin-1").decode("utf-8", errors="replace")
    return path


def _strip_prefix(path: str, prefix: str) -> Optional[str]:
    """Map a header path (``a/x``, ``b/x``, ``/dev/null``) to a repo path or None."""
    # Names containing spaces get a trailing TAB in ---/+++ headers
    path = _unquote(path.rstrip("\t"))
    if path == _DEV_NULL:
        return None
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _split_lines(text: str) -> List[str]:
    """Split on LF only; CR and other separators belong to the line content."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class DiffParser:
    """Parse unified diff text and yield ChangeEvent triples.

    Usage::

        parser = DiffParser(diff_text)
        for event in parser.parse():
            event.delta, event.hunk, event.line
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = _split_lines(diff_text)

    def parse(self) -> Generator[ChangeEvent, None, None]:
        """Yield one event per file header, hunk header, and content line."""
        idx = 0
        total = len(self._lines)

        while idx < total:
            m = _DIFF_HEADER_RE.match(self._lines[idx])
            if not m:
                # Preamble or trailing junk outside any file section
                idx += 1
                continue
            idx = yield from self._parse_file(idx, m)

    def _parse_file(self, idx: int, header: re.Match) -> Generator[ChangeEvent, None, int]:
        total = len(self._lines)
        header_line = self._lines[idx]
        old_path: Optional[str] = _strip_prefix(header.group(1), "a/")
        new_path: Optional[str] = _strip_prefix(header.group(2), "b/")
        is_binary = False
        idx += 1

        # --- sub-headers (index, modes, renames, new/deleted file, binary) ---
        while idx < total:
            sub = self._lines[idx]
            if _INDEX_RE.match(sub) or _SIMILARITY_RE.match(sub):
                idx += 1
                continue
            if _OLD_MODE_RE.match(sub) or _NEW_MODE_RE.match(sub):
                idx += 1
                continue
            if _DELETED_FILE_RE.match(sub):
                new_path = None
                idx += 1
                continue
            if _NEW_FILE_RE.match(sub):
                old_path = None
                idx += 1
                continue
            if (rm := _RENAME_FROM_RE.match(sub)):
                old_path = _unquote(rm.group(1))
                idx += 1
                continue
            if (rt := _RENAME_TO_RE.match(sub)):
                new_path = _unquote(rt.group(1))
                idx += 1
                continue
            if (bm := _BINARY_RE.match(sub)):
                is_binary = True
                if _strip_prefix(bm.group(1), "a/") is None:
                    old_path = None
                if _strip_prefix(bm.group(2), "b/") is None:
                    new_path = None
                idx += 1
                continue
            if _GIT_BINARY_PATCH_RE.match(sub):
                is_binary = True
                idx += 1
                # literal/delta payload runs until the next file section
                while idx < total and not _DIFF_HEADER_RE.match(self._lines[idx]):
                    idx += 1
                continue
            break  # not a sub-header → stop

        # --- --- a/ and +++ b/ headers are authoritative for paths ---
        if idx + 1 < total:
            om = _FILE_HEADER_OLD.match(self._lines[idx])
            nm = _FILE_HEADER_NEW.match(self._lines[idx + 1])
            if om and nm:
                old_path = _strip_prefix(om.group(1), "a/")
                new_path = _strip_prefix(nm.group(1), "b/")
                idx += 2

        delta = DiffDelta(old_path=old_path, new_path=new_path, is_binary=is_binary)
        yield ChangeEvent(delta, None, ChangeLine(LineOrigin.FILE_HEADER, header_line))

        # --- hunks ---
        hunk: Optional[HunkHeader] = None
        old_no = new_no = 0
        old_left = new_left = 0
        last_origin: Optional[LineOrigin] = None

        while idx < total:
            raw_line = self._lines[idx]

            if old_left == 0 and new_left == 0:
                if _DIFF_HEADER_RE.match(raw_line):
                    break
                hm = _HUNK_HEADER_RE.match(raw_line)
                if hm:
                    hunk = HunkHeader(
                        old_start=int(hm.group(1)),
                        old_lines=int(hm.group(2)) if hm.group(2) is not None else 1,
                        new_start=int(hm.group(3)),
                        new_lines=int(hm.group(4)) if hm.group(4) is not None else 1,
                        header=raw_line.rstrip(),
                    )
                    old_no, new_no = hunk.old_start, hunk.new_start
                    old_left, new_left = hunk.old_lines, hunk.new_lines
                    last_origin = None
                    yield ChangeEvent(delta, hunk, ChangeLine(LineOrigin.HUNK_HEADER, hunk.header))
                    idx += 1
                    continue

            if raw_line.startswith("\\"):
                # "\ No newline at end of file" refers to the preceding line
                if hunk is not None and last_origin is not None:
                    yield ChangeEvent(
                        delta,
                        hunk,
                        ChangeLine(_EOFNL_FOR[last_origin], raw_line),
                    )
                idx += 1
                continue

            if old_left == 0 and new_left == 0:
                # Outside any hunk body: unknown line, skip
                idx += 1
                continue

            marker, content = raw_line[:1], raw_line[1:]
            if marker == "+":
                line = ChangeLine(LineOrigin.ADDITION, content, None, new_no)
                new_no += 1
                new_left -= 1
            elif marker == "-":
                line = ChangeLine(LineOrigin.DELETION, content, old_no, None)
                old_no += 1
                old_left -= 1
            else:
                # " " context, or "" when a tool stripped the leading space
                line = ChangeLine(LineOrigin.CONTEXT, content, old_no, new_no)
                old_no += 1
                new_no += 1
                old_left -= 1
                new_left -= 1
            old_left = max(old_left, 0)
            new_left = max(new_left, 0)
            last_origin = line.origin
            yield ChangeEvent(delta, hunk, line)
            idx += 1

        return idx
