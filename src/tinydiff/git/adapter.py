"""Git subprocess wrapper — status records, patch text, blobs, working-tree reads."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import List, Optional

from tinydiff.content import read_bytes_limited
from tinydiff.errors import GitError, IoError
from tinydiff.git.models import DiffTarget

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 5


class StatusFlag(IntFlag):
    """Per-path change flags, one bit per (comparison, change) pair."""

    NONE = 0
    INDEX_NEW = 1 << 0
    INDEX_MODIFIED = 1 << 1
    INDEX_DELETED = 1 << 2
    INDEX_RENAMED = 1 << 3
    INDEX_TYPECHANGE = 1 << 4
    WT_NEW = 1 << 7
    WT_MODIFIED = 1 << 8
    WT_DELETED = 1 << 9
    WT_TYPECHANGE = 1 << 10
    WT_RENAMED = 1 << 11
    CONFLICTED = 1 << 15


_INDEX_CODES = {
    "A": StatusFlag.INDEX_NEW,
    "C": StatusFlag.INDEX_NEW,
    "M": StatusFlag.INDEX_MODIFIED,
    "D": StatusFlag.INDEX_DELETED,
    "R": StatusFlag.INDEX_RENAMED,
    "T": StatusFlag.INDEX_TYPECHANGE,
}

_WORKTREE_CODES = {
    "A": StatusFlag.WT_NEW,  # intent-to-add
    "M": StatusFlag.WT_MODIFIED,
    "D": StatusFlag.WT_DELETED,
    "R": StatusFlag.WT_RENAMED,
    "T": StatusFlag.WT_TYPECHANGE,
}


@dataclass(frozen=True)
class StatusRecord:
    """One path reported by the backend, with both comparisons folded in."""

    path: str
    flags: StatusFlag
    head_to_index_old_path: Optional[str] = None
    index_to_workdir_old_path: Optional[str] = None


class GitBackend(ABC):
    """Capability interface over a repository's object model."""

    @property
    @abstractmethod
    def workdir(self) -> Path:
        """Root of the working tree."""

    @abstractmethod
    def status(self, *, include_untracked: bool = True, detect_renames: bool = True) -> List[StatusRecord]:
        """Return one record per changed path, in path order."""

    @abstractmethod
    def diff(
        self,
        file_path: str,
        target: DiffTarget,
        *,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        detect_renames: bool = True,
    ) -> str:
        """Return unified patch text restricted to *file_path*."""

    @abstractmethod
    def blob_at_head(self, file_path: str) -> Optional[bytes]:
        """Bytes of *file_path* in HEAD, or None if absent (or HEAD is unborn)."""

    @abstractmethod
    def blob_in_index(self, file_path: str) -> Optional[bytes]:
        """Bytes of the stage-0 index entry for *file_path*, or None."""

    @abstractmethod
    def read_workdir_file(self, file_path: str) -> Optional[bytes]:
        """Bytes on disk, or None if the file no longer exists."""


def _run_git(
    args: list[str],
    cwd: Path,
    timeout: int = 30,
    stdin: Optional[str] = None,
) -> str:
    """Run a git command and return stdout. Raises GitError on failure.

    Output is decoded without newline translation so CR bytes survive.
    """
    cmd = ["git", "-c", "core.quotepath=off", "--literal-pathspecs", *args]
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
            input=stdin.encode("utf-8") if stdin is not None else None,
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except NotADirectoryError:
        raise GitError(f"not a directory: {cwd}")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    stdout = result.stdout.decode("utf-8", errors="replace")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        # `--quiet` lookups exit non-zero with no output when an object is missing
        if not stderr or "fatal" not in stderr.lower():
            return stdout
        raise GitError(f"git error: {stderr}")
    return stdout


def _run_git_bytes(args: list[str], cwd: Path, timeout: int = 30) -> bytes:
    """Like _run_git but returns raw stdout, for blob contents."""
    cmd = ["git", *args]
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, timeout=timeout)
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(f"git error: {stderr}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the git repository containing *cwd*."""
    cwd = cwd or Path.cwd()
    if not cwd.is_dir():
        raise GitError(f"not a git repository (or not a directory): {cwd}")
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd).strip()
    if not out:
        raise GitError(f"repository at {cwd} has no working directory")
    return Path(out)


def parse_status_records(output: str) -> List[StatusRecord]:
    """Parse ``git status --porcelain=v2 -z`` output."""
    records: List[StatusRecord] = []
    fields = output.split("\0")
    idx = 0
    while idx < len(fields):
        entry = fields[idx]
        idx += 1
        if not entry:
            continue
        kind = entry[0]

        if kind == "?":
            records.append(StatusRecord(path=entry[2:], flags=StatusFlag.WT_NEW))
        elif kind == "1":
            parts = entry.split(" ", 8)
            records.append(StatusRecord(path=parts[8], flags=_xy_flags(parts[1])))
        elif kind == "2":
            parts = entry.split(" ", 9)
            xy = parts[1]
            orig_path = fields[idx] if idx < len(fields) else None
            idx += 1
            records.append(
                StatusRecord(
                    path=parts[9],
                    flags=_xy_flags(xy),
                    head_to_index_old_path=orig_path if xy[0] in "RC" else None,
                    index_to_workdir_old_path=orig_path if xy[1] == "R" else None,
                )
            )
        elif kind == "u":
            parts = entry.split(" ", 10)
            records.append(StatusRecord(path=parts[10], flags=StatusFlag.CONFLICTED))
        # "!" (ignored) and "#" (headers) are not reported
    return records


def _xy_flags(xy: str) -> StatusFlag:
    flags = StatusFlag.NONE
    flags |= _INDEX_CODES.get(xy[0], StatusFlag.NONE)
    flags |= _WORKTREE_CODES.get(xy[1], StatusFlag.NONE)
    return flags


class SubprocessGit(GitBackend):
    """GitBackend backed by the ``git`` executable."""

    def __init__(self, workdir: Path) -> None:
        self._workdir = workdir
        self._empty_tree: Optional[str] = None

    @classmethod
    def open(cls, path: Path) -> "SubprocessGit":
        """Open the repository whose working tree root is exactly *path*."""
        root = get_repo_root(path)
        if root.resolve() != path.resolve():
            raise GitError(f"{path} is not the root of a git repository (root is {root})")
        return cls(root)

    @classmethod
    def discover(cls, path: Path) -> "SubprocessGit":
        """Open the repository containing *path*, searching parent directories."""
        return cls(get_repo_root(path))

    @property
    def workdir(self) -> Path:
        return self._workdir

    def status(self, *, include_untracked: bool = True, detect_renames: bool = True) -> List[StatusRecord]:
        args = [
            "status",
            "--porcelain=v2",
            "-z",
            "--ignored=no",
            "--untracked-files=all" if include_untracked else "--untracked-files=no",
            "--renames" if detect_renames else "--no-renames",
        ]
        return parse_status_records(_run_git(args, cwd=self._workdir))

    def diff(
        self,
        file_path: str,
        target: DiffTarget,
        *,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        detect_renames: bool = True,
    ) -> str:
        args = [
            "diff",
            f"--unified={context_lines}",
            "--find-renames" if detect_renames else "--no-renames",
            "--no-color",
            "--no-ext-diff",
            # headers must read a/ and b/ whatever diff.noprefix or diff.mnemonicPrefix say
            "--src-prefix=a/",
            "--dst-prefix=b/",
        ]
        if target == DiffTarget.STAGED:
            args.append("--cached")
            if not self._has_head():
                args.append(self._empty_tree_id())
        args += ["--", file_path]
        return _run_git(args, cwd=self._workdir)

    def blob_at_head(self, file_path: str) -> Optional[bytes]:
        return self._blob(f"HEAD:{file_path}")

    def blob_in_index(self, file_path: str) -> Optional[bytes]:
        return self._blob(f":0:{file_path}")

    def read_workdir_file(self, file_path: str) -> Optional[bytes]:
        full_path = self._workdir / file_path
        try:
            return read_bytes_limited(full_path)
        except IoError as exc:
            if isinstance(exc.__cause__, FileNotFoundError):
                return None
            raise

    # ── internals ────────────────────────────────────────────────────────────

    def _has_head(self) -> bool:
        out = _run_git(["rev-parse", "--verify", "--quiet", "HEAD^{commit}"], cwd=self._workdir)
        return bool(out.strip())

    def _empty_tree_id(self) -> str:
        if self._empty_tree is None:
            self._empty_tree = _run_git(
                ["hash-object", "-t", "tree", "--stdin"], cwd=self._workdir, stdin=""
            ).strip()
        return self._empty_tree

    def _blob(self, revision: str) -> Optional[bytes]:
        object_id = _run_git(["rev-parse", "--verify", "--quiet", revision], cwd=self._workdir).strip()
        if not object_id:
            return None
        # trees and submodule commits have no file contents
        info = _run_git(["cat-file", "--batch-check"], cwd=self._workdir, stdin=object_id + "\n").split()
        if len(info) < 2 or info[1] != "blob":
            return None
        return _run_git_bytes(["cat-file", "blob", object_id], cwd=self._workdir)
