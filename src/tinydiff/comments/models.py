"""Comment data models and their on-disk JSON shape."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class PinnedAnchor:
    """Fixed line; never re-anchored."""

    line: int

    @property
    def current_line(self) -> int:
        return self.line


@dataclass(frozen=True)
class TrackedAnchor:
    """Line located by its 3-line context window."""

    line: int
    context: str

    @property
    def current_line(self) -> int:
        return self.line


@dataclass(frozen=True)
class OrphanedAnchor:
    """Context window no longer found; ``last_known_line`` is a best guess."""

    last_known_line: int
    context: str

    @property
    def current_line(self) -> int:
        return self.last_known_line


CommentAnchor = Union[PinnedAnchor, TrackedAnchor, OrphanedAnchor]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Comment:
    """A note attached to one line of a repository file."""

    id: str
    file_path: str  # repo-relative
    anchor: CommentAnchor
    body: str
    resolved: bool = False
    created_at: int = 0  # epoch milliseconds
    updated_at: int = 0

    @classmethod
    def create(cls, id: str, file_path: str, line: int, body: str) -> "Comment":
        """New unresolved comment pinned at *line*, stamped with the current time."""
        stamp = now_ms()
        return cls(
            id=id,
            file_path=file_path,
            anchor=PinnedAnchor(line),
            body=body,
            created_at=stamp,
            updated_at=stamp,
        )

    @property
    def line(self) -> int:
        return self.anchor.current_line

    @property
    def is_orphaned(self) -> bool:
        return isinstance(self.anchor, OrphanedAnchor)


@dataclass
class CommentCollection:
    comments: List[Comment] = field(default_factory=list)

    def find(self, comment_id: str) -> Optional[Comment]:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None


# ── JSON shape ────────────────────────────────────────────────────────────────


def anchor_to_dict(anchor: CommentAnchor) -> Dict[str, Any]:
    if isinstance(anchor, PinnedAnchor):
        return {"type": "pinned", "line": anchor.line}
    if isinstance(anchor, TrackedAnchor):
        return {"type": "tracked", "line": anchor.line, "context": anchor.context}
    return {
        "type": "orphaned",
        "lastKnownLine": anchor.last_known_line,
        "context": anchor.context,
    }


def anchor_from_dict(data: Dict[str, Any]) -> CommentAnchor:
    """Raises KeyError/ValueError/TypeError on malformed input."""
    kind = data["type"]
    if kind == "pinned":
        return PinnedAnchor(_as_int(data["line"]))
    if kind == "tracked":
        return TrackedAnchor(_as_int(data["line"]), _as_str(data["context"]))
    if kind == "orphaned":
        return OrphanedAnchor(_as_int(data["lastKnownLine"]), _as_str(data["context"]))
    raise ValueError(f"unknown anchor type {kind!r}")


def _legacy_anchor(data: Dict[str, Any]) -> CommentAnchor:
    """Anchor for records written before anchors were tagged.

    Those carry ``lineNumber``, an optional ``contextWindow`` and an
    ``unanchored`` flag.
    """
    line = _as_int(data["lineNumber"])
    context = data.get("contextWindow")
    if context is None:
        return PinnedAnchor(line)
    if data.get("unanchored", False):
        return OrphanedAnchor(line, _as_str(context))
    return TrackedAnchor(line, _as_str(context))


def comment_to_dict(comment: Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "filePath": comment.file_path,
        "anchor": anchor_to_dict(comment.anchor),
        "body": comment.body,
        "resolved": comment.resolved,
        "createdAt": comment.created_at,
        "updatedAt": comment.updated_at,
    }


def comment_from_dict(data: Dict[str, Any]) -> Comment:
    if "anchor" in data:
        anchor = anchor_from_dict(data["anchor"])
    else:
        anchor = _legacy_anchor(data)
    return Comment(
        id=_as_str(data["id"]),
        file_path=_as_str(data["filePath"]),
        anchor=anchor,
        body=_as_str(data["body"]),
        resolved=bool(data["resolved"]),
        created_at=_as_int(data["createdAt"]),
        updated_at=_as_int(data["updatedAt"]),
    )


def collection_to_dict(collection: CommentCollection) -> Dict[str, Any]:
    return {"comments": [comment_to_dict(c) for c in collection.comments]}


def collection_from_dict(data: Any) -> CommentCollection:
    if not isinstance(data, dict) or not isinstance(data.get("comments"), list):
        raise ValueError("expected an object with a 'comments' list")
    return CommentCollection(comments=[comment_from_dict(c) for c in data["comments"]])


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value
