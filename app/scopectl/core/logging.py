"""Logging setup for the scopectl CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers.
The CLI attaches one Rich handler to the package logger, writing to
stderr, and avoids duplicate handlers across repeated calls.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "scopectl"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def to_logging_level(value: str) -> int:
    """Map a level name to a logging level, defaulting to WARNING."""
    return _LEVELS.get(value.strip().lower(), logging.WARNING)


def configure_logging(level: str = "warning", *, console: Console | None = None) -> logging.Logger:
    """Configure and return the package logger.

    Subsequent calls only adjust the level.

    Args:
        level: Level name ("debug", "info", "warning" or "error").
        console: Console to log to. Defaults to a stderr console.

    Returns:
        The configured ``scopectl`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    level_value = to_logging_level(level)
    logger.setLevel(level_value)

    handler = next((h for h in logger.handlers if isinstance(h, RichHandler)), None)
    if handler is None:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    handler.setLevel(level_value)

    return logger
