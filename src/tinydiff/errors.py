"""Exception types shared by the diff and comment layers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class TinyDiffError(Exception):
    """Base class for every error raised by tinydiff."""


class InvalidPathError(TinyDiffError):
    """Raised for absolute paths, ``..`` segments, or paths escaping the repository."""


class IoError(TinyDiffError):
    """Raised when a filesystem or lock operation fails."""

    def __init__(self, path: Union[str, Path], message: str) -> None:
        super().__init__(f"IO error for '{path}': {message}")
        self.path = Path(path)


class VersionControlError(TinyDiffError):
    """Raised when git is unavailable, the repository is missing, or a git command fails."""


GitError = VersionControlError


class SerializationError(TinyDiffError):
    """Raised when the persisted comment file cannot be parsed."""

    def __init__(self, path: Union[str, Path], message: str, line: Optional[int] = None) -> None:
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"Malformed comment file {where}: {message}")
        self.path = Path(path)
        self.line = line
