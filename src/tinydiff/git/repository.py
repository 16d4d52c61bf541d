"""Repository gateway — status classification, per-file diffs, and diff contents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from tinydiff.content import classify_bytes, extension_to_lang
from tinydiff.git.adapter import DEFAULT_CONTEXT_LINES, GitBackend, StatusFlag, SubprocessGit
from tinydiff.git.diff_parser import DiffParser
from tinydiff.git.hunks import DiffHunkBuilder
from tinydiff.git.models import (
    DiffSide,
    DiffTarget,
    FileContent,
    FileContents,
    FileDiff,
    FileEntry,
    FileKind,
    RepositoryStatus,
)
from tinydiff.paths import resolve_within, validate_relative_path

logger = logging.getLogger(__name__)

# Order matters: the first flag present decides the kind.
_INDEX_PRECEDENCE: Tuple[Tuple[StatusFlag, FileKind], ...] = (
    (StatusFlag.INDEX_NEW, FileKind.ADDED),
    (StatusFlag.INDEX_MODIFIED, FileKind.MODIFIED),
    (StatusFlag.INDEX_DELETED, FileKind.DELETED),
    (StatusFlag.INDEX_RENAMED, FileKind.RENAMED),
    (StatusFlag.INDEX_TYPECHANGE, FileKind.TYPECHANGE),
)

_WORKTREE_PRECEDENCE: Tuple[Tuple[StatusFlag, FileKind], ...] = (
    (StatusFlag.WT_NEW, FileKind.UNTRACKED),
    (StatusFlag.WT_MODIFIED, FileKind.MODIFIED),
    (StatusFlag.WT_DELETED, FileKind.DELETED),
    (StatusFlag.WT_RENAMED, FileKind.RENAMED),
    (StatusFlag.WT_TYPECHANGE, FileKind.TYPECHANGE),
    (StatusFlag.CONFLICTED, FileKind.CONFLICTED),
)


def classify_status(flags: StatusFlag, *, staged: bool) -> Optional[FileKind]:
    """Map status flags to the kind shown in the staged or unstaged list."""
    precedence = _INDEX_PRECEDENCE if staged else _WORKTREE_PRECEDENCE
    for flag, kind in precedence:
        if flags & flag:
            return kind
    return None


class Repository:
    """A repository opened through a GitBackend.

    No state is cached between calls; every query re-reads the repository.
    """

    def __init__(
        self,
        backend: GitBackend,
        *,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        detect_renames: bool = True,
        include_untracked: bool = True,
    ) -> None:
        self.backend = backend
        self.context_lines = context_lines
        self.detect_renames = detect_renames
        self.include_untracked = include_untracked

    @classmethod
    def open(cls, path: Union[str, Path], **options) -> "Repository":
        return cls(SubprocessGit.open(Path(path)), **options)

    @classmethod
    def discover(cls, path: Union[str, Path], **options) -> "Repository":
        return cls(SubprocessGit.discover(Path(path)), **options)

    @property
    def workdir(self) -> Path:
        return self.backend.workdir

    # ── status ───────────────────────────────────────────────────────────────

    def status(self) -> RepositoryStatus:
        result = RepositoryStatus()
        records = self.backend.status(
            include_untracked=self.include_untracked,
            detect_renames=self.detect_renames,
        )

        for record in records:
            staged_kind = classify_status(record.flags, staged=True)
            if staged_kind is not None:
                old_path = record.head_to_index_old_path if staged_kind == FileKind.RENAMED else None
                result.staged.append(FileEntry(record.path, staged_kind, old_path))

            unstaged_kind = classify_status(record.flags, staged=False)
            if unstaged_kind == FileKind.UNTRACKED:
                result.untracked.append(FileEntry(record.path, FileKind.UNTRACKED))
            elif unstaged_kind is not None:
                old_path = (
                    record.index_to_workdir_old_path if unstaged_kind == FileKind.RENAMED else None
                )
                result.unstaged.append(FileEntry(record.path, unstaged_kind, old_path))

        logger.debug(
            "Status: %d staged, %d unstaged, %d untracked",
            len(result.staged), len(result.unstaged), len(result.untracked),
        )
        return result

    # ── diff ─────────────────────────────────────────────────────────────────

    def diff(self, file_path: str, target: DiffTarget) -> FileDiff:
        validate_relative_path(file_path)
        patch = self.backend.diff(
            file_path,
            target,
            context_lines=self.context_lines,
            detect_renames=self.detect_renames,
        )
        return DiffHunkBuilder(file_path).feed_all(DiffParser(patch).parse()).build()

    # ── contents ─────────────────────────────────────────────────────────────

    def file_contents_for_diff(self, file_path: str, target: DiffTarget) -> FileContents:
        validate_relative_path(file_path)
        if target == DiffTarget.UNSTAGED:
            resolve_within(self.workdir, file_path)

        if target == DiffTarget.STAGED:
            old = self.backend.blob_at_head(file_path)
            new = self.backend.blob_in_index(file_path)
        else:
            old = self.backend.blob_in_index(file_path)
            new = self.backend.read_workdir_file(file_path)
            if new is None:
                logger.debug("%s no longer exists in the working tree", file_path)

        lang = extension_to_lang(file_path)
        return FileContents(
            old_file=DiffSide(name=file_path, lang=lang, content=_classify(old)),
            new_file=DiffSide(name=file_path, lang=lang, content=_classify(new)),
        )


def _classify(data: Optional[bytes]) -> Optional[FileContent]:
    return classify_bytes(data) if data is not None else None


# ── convenience entry points for string-based callers ────────────────────────


def get_status(repo_path: Union[str, Path], **options) -> RepositoryStatus:
    return Repository.discover(repo_path, **options).status()


def get_file_diff(
    repo_path: Union[str, Path], file_path: str, target: DiffTarget, **options
) -> FileDiff:
    validate_relative_path(file_path)
    return Repository.discover(repo_path, **options).diff(file_path, target)


def get_file_contents(
    repo_path: Union[str, Path], file_path: str, target: DiffTarget, **options
) -> FileContents:
    validate_relative_path(file_path)
    return Repository.discover(repo_path, **options).file_contents_for_diff(file_path, target)
