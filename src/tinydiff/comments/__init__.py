"""Line comments anchored to file content."""

from tinydiff.comments.anchors import (
    anchor_for_line,
    build_context_window,
    extract_context_window,
    reanchor,
)
from tinydiff.comments.models import (
    Comment,
    CommentAnchor,
    CommentCollection,
    OrphanedAnchor,
    PinnedAnchor,
    TrackedAnchor,
)
from tinydiff.comments.store import (
    CommentStore,
    delete_comment,
    get_comments_for_file,
    load_comments,
    save_comment,
)

__all__ = [
    "Comment",
    "CommentAnchor",
    "CommentCollection",
    "CommentStore",
    "OrphanedAnchor",
    "PinnedAnchor",
    "TrackedAnchor",
    "anchor_for_line",
    "build_context_window",
    "delete_comment",
    "extract_context_window",
    "get_comments_for_file",
    "load_comments",
    "reanchor",
    "save_comment",
]
