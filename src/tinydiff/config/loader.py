"""Load and merge configuration from .tinydiff.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from tinydiff.config.schema import (
    LOG_LEVELS,
    OUTPUT_FORMATS,
    DiffConfig,
    LoggingConfig,
    OutputConfig,
    StatusConfig,
    TinyDiffConfig,
)
from tinydiff.errors import TinyDiffError

CONFIG_FILE = ".tinydiff.toml"


class ConfigError(TinyDiffError):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILE
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _validate(cfg: TinyDiffConfig) -> None:
    lines = cfg.diff.context_lines
    if isinstance(lines, bool) or not isinstance(lines, int) or lines < 0:
        raise ConfigError(f"diff.context_lines must be a non-negative integer, got {lines!r}")
    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(f"output.format must be one of {', '.join(OUTPUT_FORMATS)}")
    if cfg.logging.level not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")


def _merge_env_overrides(cfg: TinyDiffConfig) -> None:
    """Apply TINYDIFF_* environment variable overrides."""
    if val := os.environ.get("TINYDIFF_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("TINYDIFF_LOG_LEVEL"):
        if val.lower() in LOG_LEVELS:
            cfg.logging.level = val.lower()  # type: ignore[assignment]
    if val := os.environ.get("TINYDIFF_CONTEXT_LINES"):
        try:
            cfg.diff.context_lines = max(int(val), 0)
        except ValueError:
            pass


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> TinyDiffConfig:
    """Load, validate, and return a TinyDiffConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = TinyDiffConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = TinyDiffConfig(
            version=str(raw.get("version", "1.0")),
            diff=_build_section(raw, DiffConfig, "diff"),
            status=_build_section(raw, StatusConfig, "status"),
            output=_build_section(raw, OutputConfig, "output"),
            logging=_build_section(raw, LoggingConfig, "logging"),
        )
        _validate(cfg)

    _merge_env_overrides(cfg)
    return cfg
