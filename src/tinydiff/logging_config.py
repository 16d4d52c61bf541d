"""Logging configuration — Rich handler on stderr for the command layer."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(
    level: str = "warning", *, verbose: bool = False, quiet: bool = False
) -> logging.Logger:
    """Configure the ``tinydiff`` logger. *verbose* and *quiet* override *level*."""
    if quiet:
        resolved = logging.ERROR
    elif verbose:
        resolved = logging.DEBUG
    else:
        resolved = _LEVELS.get(level.lower(), logging.WARNING)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("tinydiff")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(resolved)
    return logger

