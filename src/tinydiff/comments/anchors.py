"""Content anchoring — fingerprint a line by its neighbours and find it again.

A comment's anchor stores the commented line plus the line above and below,
joined by newlines. When the file changes, the first line whose 3-line
window matches exactly becomes the comment's new position. Edits to the
commented line or its neighbours orphan the comment; duplicate windows
resolve to the first occurrence.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Sequence

from tinydiff.comments.models import (
    Comment,
    CommentAnchor,
    OrphanedAnchor,
    PinnedAnchor,
    TrackedAnchor,
)

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` / ``\\r\\n`` without a trailing empty line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def build_context_window(lines: Sequence[str], idx: int) -> str:
    """Lines idx-1, idx, idx+1 joined by newlines; missing neighbours are empty."""
    before = lines[idx - 1] if 0 < idx <= len(lines) else ""
    target = lines[idx] if 0 <= idx < len(lines) else ""
    after = lines[idx + 1] if 0 <= idx + 1 < len(lines) else ""
    return f"{before}\n{target}\n{after}"


def extract_context_window(file_contents: str, line_number: int) -> str:
    """Context window around 1-based *line_number*."""
    return build_context_window(split_lines(file_contents), max(line_number - 1, 0))


def anchor_for_line(line: int, file_contents: Optional[str]) -> CommentAnchor:
    """Tracked anchor when content is available, pinned otherwise."""
    if file_contents is None or line < 1:
        return PinnedAnchor(line)
    return TrackedAnchor(line, extract_context_window(file_contents, line))


def find_context(file_contents: str, context: str) -> Optional[int]:
    """1-based line of the first window equal to *context*, or None."""
    lines = split_lines(file_contents)
    for idx in range(len(lines)):
        if build_context_window(lines, idx) == context:
            return idx + 1
    return None


def reanchor(comment: Comment, file_contents: str) -> Comment:
    """Return *comment* with its anchor re-located in *file_contents*.

    Pinned comments come back unchanged. Tracked and orphaned comments become
    tracked at the matching line, or orphaned at their previous line.
    """
    anchor = comment.anchor
    if isinstance(anchor, PinnedAnchor):
        return comment

    line = find_context(file_contents, anchor.context)
    if line is not None:
        new_anchor: CommentAnchor = TrackedAnchor(line, anchor.context)
    else:
        logger.info("Comment %s on %s lost its anchor", comment.id, comment.file_path)
        new_anchor = OrphanedAnchor(anchor.current_line, anchor.context)

    if new_anchor == anchor:
        return comment
    return dataclasses.replace(comment, anchor=new_anchor)
