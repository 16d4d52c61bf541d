"""Data models for repository status, diffs, and file contents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from tinydiff.content import BinaryContent, FileContent, TextContent  # noqa: F401


class FileKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNTRACKED = "untracked"
    TYPECHANGE = "typechange"
    CONFLICTED = "conflicted"


class LineKind(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


class DiffTarget(str, Enum):
    """Which pair of trees a diff compares."""

    STAGED = "staged"  # HEAD vs index
    UNSTAGED = "unstaged"  # index vs working tree


@dataclass(frozen=True)
class FileEntry:
    """One changed path in a status listing."""

    path: str
    kind: FileKind
    old_path: Optional[str] = None  # set on renames


@dataclass
class RepositoryStatus:
    staged: List[FileEntry] = field(default_factory=list)
    unstaged: List[FileEntry] = field(default_factory=list)
    untracked: List[FileEntry] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single line inside a hunk."""

    kind: LineKind
    text: str
    old_line_no: Optional[int] = None
    new_line_no: Optional[int] = None


@dataclass
class DiffHunk:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def range_key(self) -> tuple[int, int, int, int]:
        return (self.old_start, self.old_lines, self.new_start, self.new_lines)


@dataclass
class FileDiff:
    """Structured diff of a single file."""

    path: str
    old_path: Optional[str] = None
    is_binary: bool = False
    hunks: List[DiffHunk] = field(default_factory=list)


@dataclass(frozen=True)
class DiffSide:
    """One side of a two-way comparison. ``content`` is None when the file is absent."""

    name: str
    lang: Optional[str] = None
    content: Optional[FileContent] = None


@dataclass(frozen=True)
class FileContents:
    old_file: DiffSide
    new_file: DiffSide


# --- Change feed: what a diff engine emits, one (delta, hunk, line) triple at a time ---


class LineOrigin(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT_EOFNL = "context_eofnl"
    ADD_EOFNL = "add_eofnl"
    DEL_EOFNL = "del_eofnl"
    FILE_HEADER = "file_header"
    HUNK_HEADER = "hunk_header"


@dataclass(frozen=True)
class DiffDelta:
    """File-level metadata of one patch. A path is None on the side where the file is absent."""

    old_path: Optional[str]
    new_path: Optional[str]
    is_binary: bool = False


@dataclass(frozen=True)
class HunkHeader:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str

    @property
    def range_key(self) -> tuple[int, int, int, int]:
        return (self.old_start, self.old_lines, self.new_start, self.new_lines)


@dataclass(frozen=True, slots=True)
class ChangeLine:
    origin: LineOrigin
    content: str
    old_line_no: Optional[int] = None
    new_line_no: Optional[int] = None


@dataclass(frozen=True)
class ChangeEvent:
    delta: DiffDelta
    hunk: Optional[HunkHeader]
    line: ChangeLine
