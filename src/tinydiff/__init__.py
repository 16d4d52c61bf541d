"""tinydiff — structured git diffs and content-anchored line comments."""

__version__ = "0.1.0"
