"""Path validation — keep caller-supplied paths inside the repository root."""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

from tinydiff.errors import InvalidPathError, IoError


def validate_relative_path(file_path: str) -> str:
    """Reject absolute paths and ``..`` segments. Returns *file_path* unchanged.

    Both separators are checked so ``..\\secret`` is caught on every platform.
    """
    if not file_path:
        raise InvalidPathError("Invalid file path: must not be empty")
    if (
        PurePosixPath(file_path).is_absolute()
        or PureWindowsPath(file_path).is_absolute()
        or PureWindowsPath(file_path).drive
    ):
        raise InvalidPathError(
            f"Invalid file path '{file_path}': must be relative and cannot contain '..'"
        )
    if ".." in PureWindowsPath(file_path).parts:
        raise InvalidPathError(
            f"Invalid file path '{file_path}': must be relative and cannot contain '..'"
        )
    return file_path


def resolve_within(root: Path, file_path: str) -> Path:
    """Join *file_path* onto *root* and prove the canonical result stays under *root*.

    Symlinks are resolved. A target that does not exist yet, including one
    whose parent directories are gone too, is checked through its nearest
    existing ancestor.
    """
    validate_relative_path(file_path)

    try:
        canonical_root = root.resolve(strict=True)
    except OSError as exc:
        raise IoError(root, str(exc)) from exc

    full_path = root / file_path
    existing = full_path
    missing: list[str] = []
    while not existing.exists() and existing != root:
        missing.append(existing.name)
        existing = existing.parent
    try:
        canonical = existing.resolve(strict=True).joinpath(*reversed(missing))
    except OSError as exc:
        raise IoError(full_path, str(exc)) from exc

    if canonical != canonical_root and canonical_root not in canonical.parents:
        raise InvalidPathError(
            f"Path traversal detected: '{file_path}' escapes {canonical_root}"
        )
    return canonical

