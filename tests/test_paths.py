"""Tests for relative-path validation and containment checks."""

from pathlib import Path

import pytest

from tinydiff.errors import InvalidPathError
from tinydiff.paths import resolve_within, validate_relative_path


class TestValidateRelativePath:
    @pytest.mark.parametrize("path", ["src/main.py", "a..b/c.txt", "README", "dir/.hidden"])
    def test_accepts(self, path):
        assert validate_relative_path(path) == path

    @pytest.mark.parametrize(
        "path",
        ["", "..", "../secret", "a/../b", "a/..", "/etc/passwd", "C:\\Windows", "C:foo", "..\\x", "\\\\server\\share"],
    )
    def test_rejects(self, path):
        with pytest.raises(InvalidPathError):
            validate_relative_path(path)


class TestResolveWithin:
    def test_existing_file(self, tmp_path: Path):
        (tmp_path / "a.txt").write_text("x")
        assert resolve_within(tmp_path, "a.txt") == (tmp_path / "a.txt").resolve()

    def test_missing_file_checked_through_parent(self, tmp_path: Path):
        assert resolve_within(tmp_path, "new.txt") == tmp_path.resolve() / "new.txt"

    def test_missing_nested_directories(self, tmp_path: Path):
        expected = tmp_path.resolve() / "gone" / "deeper" / "f.py"
        assert resolve_within(tmp_path, "gone/deeper/f.py") == expected

    def test_missing_below_symlink_escape(self, tmp_path: Path, tmp_path_factory):
        outside = tmp_path_factory.mktemp("elsewhere")
        (tmp_path / "link").symlink_to(outside, target_is_directory=True)
        with pytest.raises(InvalidPathError):
            resolve_within(tmp_path, "link/missing/f.py")

    def test_symlink_inside_root_allowed(self, tmp_path: Path):
        (tmp_path / "real").mkdir()
        (tmp_path / "real" / "f.txt").write_text("x")
        (tmp_path / "alias").symlink_to(tmp_path / "real", target_is_directory=True)
        assert resolve_within(tmp_path, "alias/f.txt") == (tmp_path / "real" / "f.txt").resolve()

    def test_symlink_escape(self, tmp_path: Path, tmp_path_factory):
        outside = tmp_path_factory.mktemp("elsewhere")
        (tmp_path / "out").symlink_to(outside / "target.txt")
        (outside / "target.txt").write_text("x")
        with pytest.raises(InvalidPathError):
            resolve_within(tmp_path, "out")

    def test_traversal_rejected_before_io(self, tmp_path: Path):
        with pytest.raises(InvalidPathError):
            resolve_within(tmp_path / "does-not-exist", "../x")
