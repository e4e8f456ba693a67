"""
Opt-in console output for the ``imgseg`` logger tree.

Library modules only ever call ``logging.getLogger(__name__)``; attaching a
handler is left to entry points such as the CLI.
"""

from __future__ import annotations

import logging
import sys

from .exceptions import ConfigurationError

PLAIN_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    if not isinstance(value, int):
        raise ConfigurationError(
            f"Unknown log level '{level}'.",
            suggestion="Use DEBUG, INFO, WARNING or ERROR",
        )
    return value


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if getattr(handler, "_imgseg_console", False):
            return handler
    return None


def configure_imgseg_logging(*, level: int | str = logging.INFO, fmt: str | None = None) -> logging.Logger:
    """
    Route ``imgseg`` log records to stderr and return the package logger.

    Generation statistics are INFO records; DEBUG adds timestamps and logger
    names unless ``fmt`` is given. Calling it again only updates the level and
    format. When the root logger already has handlers, records are left to
    propagate there and no handler is attached.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger("imgseg")
    logger.setLevel(resolved)
    if logging.getLogger().handlers and _console_handler(logger) is None:
        return logger

    handler = _console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._imgseg_console = True
        logger.addHandler(handler)
        logger.propagate = False
    handler.setFormatter(logging.Formatter(fmt or (DEBUG_FORMAT if resolved <= logging.DEBUG else PLAIN_FORMAT)))
    return logger


__all__ = ["configure_imgseg_logging"]
