"""File-backed comment store — ``<repo>/.tinydiff/comments.json``.

Every mutation runs under the repository lock and re-reads the file first,
so concurrent writers in other processes are merged rather than
overwritten. Writes go to ``comments.json.tmp`` and are renamed over the
canonical file, which therefore always holds a complete document.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from tinydiff.comments.anchors import anchor_for_line, reanchor
from tinydiff.comments.lock import RepositoryLock
from tinydiff.comments.models import (
    Comment,
    CommentCollection,
    collection_from_dict,
    collection_to_dict,
    now_ms,
)
from tinydiff.errors import IoError, SerializationError
from tinydiff.paths import validate_relative_path

logger = logging.getLogger(__name__)

STORE_DIR = ".tinydiff"
COMMENTS_FILE = "comments.json"
TEMP_FILE = "comments.json.tmp"
LOCK_FILE = "comments.lock"


class CommentStore:
    """Comments for one repository working tree."""

    def __init__(self, repo_root: Union[str, Path]) -> None:
        self.repo_root = Path(repo_root)

    @property
    def store_dir(self) -> Path:
        return self.repo_root / STORE_DIR

    @property
    def comments_path(self) -> Path:
        return self.store_dir / COMMENTS_FILE

    # ── reads ────────────────────────────────────────────────────────────────

    def load(self) -> CommentCollection:
        """Current collection; empty when nothing has been written yet."""
        path = self.comments_path
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CommentCollection()
        except OSError as exc:
            raise IoError(path, str(exc)) from exc

        try:
            return collection_from_dict(json.loads(text))
        except json.JSONDecodeError as exc:
            raise SerializationError(path, exc.msg, line=exc.lineno) from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(path, f"{type(exc).__name__}: {exc}") from exc

    def comments_for_file(self, file_path: str, file_contents: str) -> List[Comment]:
        """Comments on *file_path*, re-anchored against *file_contents*. Nothing is written back."""
        validate_relative_path(file_path)
        return [
            reanchor(comment, file_contents)
            for comment in self.load().comments
            if comment.file_path == file_path
        ]

    # ── writes ───────────────────────────────────────────────────────────────

    def upsert(self, comment: Comment, file_contents: Optional[str] = None) -> Comment:
        """Insert *comment*, or replace the stored comment with the same id in place.

        The anchor is rebuilt from the comment's current line: tracked when
        *file_contents* is given, pinned otherwise.
        """
        validate_relative_path(comment.file_path)
        comment = dataclasses.replace(
            comment, anchor=anchor_for_line(comment.line, file_contents)
        )

        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoError(self.store_dir, str(exc)) from exc

        with self._lock():
            collection = self.load()
            for idx, existing in enumerate(collection.comments):
                if existing.id == comment.id:
                    collection.comments[idx] = comment
                    break
            else:
                collection.comments.append(comment)
            self.persist(collection)

        logger.debug("Saved comment %s on %s:%d", comment.id, comment.file_path, comment.line)
        return comment

    def delete(self, comment_id: str) -> bool:
        """Remove the comment with *comment_id*. Returns False when there was none."""
        if not self.store_dir.is_dir():
            return False

        with self._lock():
            collection = self.load()
            if not collection.comments:
                return False
            remaining = [c for c in collection.comments if c.id != comment_id]
            if len(remaining) == len(collection.comments):
                return False
            self.persist(CommentCollection(comments=remaining))

        logger.debug("Deleted comment %s", comment_id)
        return True

    def set_resolved(
        self, comment_id: str, resolved: bool, file_contents: Optional[str] = None
    ) -> Optional[Comment]:
        """Mark a comment resolved or unresolved. Returns None when the id is unknown.

        With *file_contents* the anchor is refreshed against the file first.
        """
        if not self.store_dir.is_dir():
            return None

        with self._lock():
            collection = self.load()
            for idx, existing in enumerate(collection.comments):
                if existing.id != comment_id:
                    continue
                updated = existing if file_contents is None else reanchor(existing, file_contents)
                updated = dataclasses.replace(updated, resolved=resolved, updated_at=now_ms())
                collection.comments[idx] = updated
                self.persist(collection)
                return updated
        return None

    def persist(self, collection: CommentCollection) -> None:
        """Write *collection* atomically: temp file, then rename over the canonical file."""
        temp_path = self.store_dir / TEMP_FILE
        contents = json.dumps(collection_to_dict(collection), indent=2, ensure_ascii=False)

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(contents)
                f.flush()
                os.fsync(f.fileno())
        except OSError as exc:
            _remove_quietly(temp_path)
            raise IoError(temp_path, str(exc)) from exc

        try:
            os.replace(temp_path, self.comments_path)
        except OSError as exc:
            _remove_quietly(temp_path)
            raise IoError(self.comments_path, str(exc)) from exc

    def _lock(self) -> RepositoryLock:
        return RepositoryLock(self.store_dir / LOCK_FILE)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", path, exc)


# ── convenience entry points for string-based callers ────────────────────────


def load_comments(repo_root: Union[str, Path]) -> CommentCollection:
    return CommentStore(repo_root).load()


def save_comment(
    repo_root: Union[str, Path], comment: Comment, file_contents: Optional[str] = None
) -> Comment:
    return CommentStore(repo_root).upsert(comment, file_contents)


def delete_comment(repo_root: Union[str, Path], comment_id: str) -> bool:
    return CommentStore(repo_root).delete(comment_id)


def get_comments_for_file(
    repo_root: Union[str, Path], file_path: str, file_contents: str
) -> List[Comment]:
    return CommentStore(repo_root).comments_for_file(file_path, file_contents)
