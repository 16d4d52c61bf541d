"""Git interface layer — backend, change feed, hunk builder, repository gateway."""

from tinydiff.git.adapter import GitBackend, StatusFlag, StatusRecord, SubprocessGit, get_repo_root
from tinydiff.git.diff_parser import DiffParser
from tinydiff.git.hunks import DiffHunkBuilder
from tinydiff.git.models import (
    BinaryContent,
    DiffHunk,
    DiffLine,
    DiffSide,
    DiffTarget,
    FileContents,
    FileDiff,
    FileEntry,
    FileKind,
    LineKind,
    RepositoryStatus,
    TextContent,
)
from tinydiff.git.repository import (
    Repository,
    classify_status,
    get_file_contents,
    get_file_diff,
    get_status,
)

__all__ = [
    "BinaryContent",
    "DiffHunk",
    "DiffHunkBuilder",
    "DiffLine",
    "DiffParser",
    "DiffSide",
    "DiffTarget",
    "FileContents",
    "FileDiff",
    "FileEntry",
    "FileKind",
    "GitBackend",
    "LineKind",
    "Repository",
    "RepositoryStatus",
    "StatusFlag",
    "StatusRecord",
    "SubprocessGit",
    "TextContent",
    "classify_status",
    "get_file_contents",
    "get_file_diff",
    "get_repo_root",
    "get_status",
]
