"""JSON rendering of core results, camelCase keys for a UI bridge."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from tinydiff.comments.models import Comment, comment_to_dict
from tinydiff.content import BinaryContent, FileContent
from tinydiff.git.models import DiffHunk, DiffSide, FileContents, FileDiff, FileEntry, RepositoryStatus


def entry_to_dict(entry: FileEntry) -> Dict[str, Any]:
    return {
        "path": entry.path,
        "status": entry.kind.value,
        "oldPath": entry.old_path,
    }


def status_to_dict(status: RepositoryStatus) -> Dict[str, Any]:
    return {
        "staged": [entry_to_dict(e) for e in status.staged],
        "unstaged": [entry_to_dict(e) for e in status.unstaged],
        "untracked": [entry_to_dict(e) for e in status.untracked],
    }


def hunk_to_dict(hunk: DiffHunk) -> Dict[str, Any]:
    return {
        "oldStart": hunk.old_start,
        "oldLines": hunk.old_lines,
        "newStart": hunk.new_start,
        "newLines": hunk.new_lines,
        "header": hunk.header,
        "lines": [
            {
                "changeType": line.kind.value,
                "content": line.text,
                "oldLineNo": line.old_line_no,
                "newLineNo": line.new_line_no,
            }
            for line in hunk.lines
        ],
    }


def diff_to_dict(diff: FileDiff) -> Dict[str, Any]:
    return {
        "path": diff.path,
        "oldPath": diff.old_path,
        "isBinary": diff.is_binary,
        "hunks": [hunk_to_dict(h) for h in diff.hunks],
    }


def content_to_dict(content: Optional[FileContent]) -> Optional[Dict[str, Any]]:
    if content is None:
        return None
    if isinstance(content, BinaryContent):
        return {"type": "binary", "size": content.size}
    return {"type": "text", "contents": content.contents}


def side_to_dict(side: DiffSide) -> Dict[str, Any]:
    return {"name": side.name, "lang": side.lang, "content": content_to_dict(side.content)}


def contents_to_dict(contents: FileContents) -> Dict[str, Any]:
    return {
        "oldFile": side_to_dict(contents.old_file),
        "newFile": side_to_dict(contents.new_file),
    }


def comments_to_list(comments: List[Comment]) -> List[Dict[str, Any]]:
    return [comment_to_dict(c) for c in comments]


def render(payload: Any) -> str:
    """Return formatted JSON string."""
    return json.dumps(payload, indent=2, ensure_ascii=False)
