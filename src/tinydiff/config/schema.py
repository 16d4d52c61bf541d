"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from tinydiff.git.adapter import DEFAULT_CONTEXT_LINES

OutputFormat = Literal["terminal", "json"]
LogLevel = Literal["debug", "info", "warning", "error"]

OUTPUT_FORMATS = ("terminal", "json")
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class DiffConfig:
    context_lines: int = DEFAULT_CONTEXT_LINES
    detect_renames: bool = True


@dataclass
class StatusConfig:
    include_untracked: bool = True


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"


@dataclass
class LoggingConfig:
    level: LogLevel = "warning"


@dataclass
class TinyDiffConfig:
    version: str = "1.0"
    diff: DiffConfig = field(default_factory=DiffConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def repository_options(self) -> dict:
        """Keyword arguments for ``Repository.open`` / ``Repository.discover``."""
        return {
            "context_lines": self.diff.context_lines,
            "detect_renames": self.diff.detect_renames,
            "include_untracked": self.status.include_untracked,
        }
