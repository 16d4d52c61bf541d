"""Configuration loading, schema, and defaults."""

from tinydiff.config.loader import ConfigError, load_config
from tinydiff.config.schema import TinyDiffConfig

__all__ = [
    "ConfigError",
    "TinyDiffConfig",
    "load_config",
]
