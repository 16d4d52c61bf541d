"""Reassemble a change feed into hunks of tagged lines."""

from __future__ import annotations

from typing import Iterable, List, Optional

from tinydiff.git.models import (
    ChangeEvent,
    ChangeLine,
    DiffDelta,
    DiffHunk,
    DiffLine,
    FileDiff,
    HunkHeader,
    LineKind,
    LineOrigin,
)

_LINE_KIND = {
    LineOrigin.CONTEXT: LineKind.CONTEXT,
    LineOrigin.ADDITION: LineKind.ADDITION,
    LineOrigin.DELETION: LineKind.DELETION,
    LineOrigin.CONTEXT_EOFNL: LineKind.CONTEXT,
    LineOrigin.ADD_EOFNL: LineKind.CONTEXT,
    LineOrigin.DEL_EOFNL: LineKind.CONTEXT,
}


class DiffHunkBuilder:
    """Accumulate (delta, hunk, line) events for one file into a FileDiff.

    A hunk is opened only when the header's (old_start, old_lines,
    new_start, new_lines) tuple differs from the last opened hunk, so an
    engine that reports one region across several callbacks still yields a
    single hunk.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._old_path: Optional[str] = None
        self._is_binary = False
        self._hunks: List[DiffHunk] = []

    def feed(self, delta: DiffDelta, hunk: Optional[HunkHeader], line: ChangeLine) -> None:
        self._track_delta(delta)

        if hunk is not None:
            last = self._hunks[-1] if self._hunks else None
            if last is None or last.range_key != hunk.range_key:
                self._hunks.append(
                    DiffHunk(
                        old_start=hunk.old_start,
                        old_lines=hunk.old_lines,
                        new_start=hunk.new_start,
                        new_lines=hunk.new_lines,
                        header=hunk.header.rstrip(),
                    )
                )

        kind = _LINE_KIND.get(line.origin)
        if kind is None:
            return  # file and hunk headers are not content
        if not self._hunks:
            return  # content before any hunk header: malformed input

        self._hunks[-1].lines.append(
            DiffLine(kind, line.content.rstrip("\n"), line.old_line_no, line.new_line_no)
        )

    def feed_all(self, events: Iterable[ChangeEvent]) -> "DiffHunkBuilder":
        for event in events:
            self.feed(event.delta, event.hunk, event.line)
        return self

    def build(self) -> FileDiff:
        return FileDiff(
            path=self._path,
            old_path=self._old_path,
            is_binary=self._is_binary,
            hunks=[] if self._is_binary else list(self._hunks),
        )

    def _track_delta(self, delta: DiffDelta) -> None:
        current = delta.new_path if delta.new_path is not None else delta.old_path
        if current is not None:
            self._path = current
        if delta.old_path is not None and delta.old_path != self._path:
            self._old_path = delta.old_path
        if delta.is_binary:
            self._is_binary = True
