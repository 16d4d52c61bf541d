"""Starter .tinydiff.toml template."""

DEFAULT_TOML = """\
# tinydiff configuration
version = "1.0"

[diff]
context_lines = 5          # unified context around each change
detect_renames = true

[status]
include_untracked = true

[output]
format = "terminal"        # terminal | json

[logging]
level = "warning"          # debug | info | warning | error
"""
