"""File reading, binary classification, and language tagging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Optional, Union

from tinydiff.errors import IoError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 50 * 1024 * 1024

_FILENAME_LANGS: Dict[str, str] = {
    "makefile": "makefile",
    "gnumakefile": "makefile",
    "dockerfile": "dockerfile",
    ".gitignore": "ignore",
    ".dockerignore": "ignore",
    ".env": "properties",
    ".env.local": "properties",
    ".env.example": "properties",
}

_EXTENSION_LANGS: Dict[str, str] = {
    "js": "javascript", "mjs": "javascript", "cjs": "javascript",
    "ts": "typescript", "mts": "typescript", "cts": "typescript",
    "tsx": "tsx",
    "jsx": "jsx",
    "html": "html", "htm": "html",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "json": "json",
    "jsonc": "jsonc",
    "xml": "xml", "svg": "xml",
    "yaml": "yaml", "yml": "yaml",
    "toml": "toml",
    "rs": "rust",
    "go": "go",
    "c": "c", "h": "c",
    "cpp": "cpp", "cc": "cpp", "cxx": "cpp", "hpp": "cpp", "hxx": "cpp",
    "zig": "zig",
    "py": "python",
    "rb": "ruby",
    "php": "php",
    "lua": "lua",
    "sh": "bash", "bash": "bash", "zsh": "bash",
    "fish": "fish",
    "ps1": "powershell", "psm1": "powershell",
    "java": "java",
    "kt": "kotlin", "kts": "kotlin",
    "scala": "scala", "sc": "scala",
    "groovy": "groovy", "gradle": "groovy",
    "sql": "sql",
    "md": "markdown", "markdown": "markdown",
    "dockerfile": "dockerfile",
    "makefile": "makefile", "mk": "makefile",
    "graphql": "graphql", "gql": "graphql",
    "vue": "vue",
    "svelte": "svelte",
    "astro": "astro",
    "swift": "swift",
    "r": "r",
    "dart": "dart",
    "ex": "elixir", "exs": "elixir",
    "erl": "erlang", "hrl": "erlang",
    "hs": "haskell", "lhs": "haskell",
    "ml": "ocaml", "mli": "ocaml",
    "clj": "clojure", "cljs": "clojure", "cljc": "clojure", "edn": "clojure",
    "lisp": "lisp", "cl": "lisp", "el": "lisp",
    "nim": "nim",
    "v": "v",
    "tf": "hcl", "tfvars": "hcl",
    "nix": "nix",
    "proto": "protobuf",
    "prisma": "prisma",
    "sol": "solidity",
}


def extension_to_lang(path: str) -> Optional[str]:
    """Best-effort language id for *path*, from its file name or extension."""
    name = PurePosixPath(path.replace("\\", "/")).name
    lang = _FILENAME_LANGS.get(name.lower())
    if lang is not None:
        return lang

    # Dotfiles like ".bashrc" have no extension.
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return None
    return _EXTENSION_LANGS.get(ext.lower())


@dataclass(frozen=True)
class TextContent:
    contents: str


@dataclass(frozen=True)
class BinaryContent:
    size: int  # bytes


FileContent = Union[TextContent, BinaryContent]


def is_binary(data: bytes) -> bool:
    return b"\x00" in data


def classify_bytes(data: bytes) -> FileContent:
    """NUL byte → binary (size only); otherwise lossily decoded UTF-8 text."""
    if is_binary(data):
        return BinaryContent(size=len(data))
    return TextContent(contents=data.decode("utf-8", errors="replace"))


@dataclass(frozen=True)
class ReadFileResult:
    name: str
    contents: str
    lang: Optional[str]
    is_binary: bool


def read_bytes_limited(path: Path, max_size: int = MAX_FILE_SIZE) -> bytes:
    """Read *path* whole, refusing files above *max_size*."""
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise IoError(path, str(exc)) from exc
    if size > max_size:
        raise IoError(path, f"File too large: {size} bytes (max {max_size} bytes)")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise IoError(path, str(exc)) from exc


def read_file(path: Path) -> ReadFileResult:
    """Read a file from disk for direct display."""
    data = read_bytes_limited(path)
    binary = is_binary(data)
    if binary:
        logger.debug("Classified %s as binary (%d bytes)", path, len(data))
    return ReadFileResult(
        name=path.name,
        contents="" if binary else data.decode("utf-8", errors="replace"),
        lang=extension_to_lang(str(path)),
        is_binary=binary,
    )
