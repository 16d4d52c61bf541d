"""Tests for language tagging, binary classification, and bounded reads."""

from pathlib import Path

import pytest

from tinydiff.content import (
    BinaryContent,
    TextContent,
    classify_bytes,
    extension_to_lang,
    is_binary,
    read_bytes_limited,
    read_file,
)
from tinydiff.errors import IoError


class TestExtensionToLang:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("Makefile", "makefile"),
            ("file.rs", "rust"),
            ("file.unknown", None),
            (".gitignore", "ignore"),
            ("src/app/main.PY", "python"),
            ("web\\index.tsx", "tsx"),
            ("Dockerfile", "dockerfile"),
            ("config/.env", "properties"),
            (".bashrc", None),
            ("no_extension", None),
            ("archive.tar.gz", None),
        ],
    )
    def test_mapping(self, path, expected):
        assert extension_to_lang(path) == expected


class TestClassification:
    def test_nul_byte_means_binary(self):
        assert is_binary(b"abc\x00def")
        assert classify_bytes(b"abc\x00def") == BinaryContent(size=7)

    def test_text_is_decoded(self):
        assert classify_bytes("héllo\n".encode("utf-8")) == TextContent("héllo\n")

    def test_invalid_utf8_replaced(self):
        content = classify_bytes(b"ok \xff\xfe end")
        assert isinstance(content, TextContent)
        assert "�" in content.contents

    def test_empty_is_text(self):
        assert classify_bytes(b"") == TextContent("")


class TestReading:
    def test_read_file(self, tmp_path: Path):
        path = tmp_path / "main.go"
        path.write_text("package main\n")
        result = read_file(path)
        assert result.name == "main.go"
        assert result.contents == "package main\n"
        assert result.lang == "go"
        assert result.is_binary is False

    def test_read_binary_file(self, tmp_path: Path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x00\x01")
        result = read_file(path)
        assert result.is_binary is True
        assert result.contents == ""

    def test_size_limit(self, tmp_path: Path):
        path = tmp_path / "big.txt"
        path.write_bytes(b"x" * 11)
        with pytest.raises(IoError, match="too large"):
            read_bytes_limited(path, max_size=10)
        assert read_bytes_limited(path, max_size=11) == b"x" * 11

    def test_missing_file_chains_os_error(self, tmp_path: Path):
        with pytest.raises(IoError) as info:
            read_bytes_limited(tmp_path / "nope.txt")
        assert isinstance(info.value.__cause__, FileNotFoundError)
        assert info.value.path == tmp_path / "nope.txt"
