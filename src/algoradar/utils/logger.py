"""Logger configuration and convenience helpers."""

from __future__ import annotations

import logging
import os
import sys

_DEFAULT_LOGGER_NAME = "algoradar"
_DEFAULT_FORMATTER = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
_DEFAULT_HANDLER = logging.StreamHandler(sys.stdout)
_DEFAULT_HANDLER.setFormatter(_DEFAULT_FORMATTER)


def _resolve_level(default: str = "INFO") -> int:
    level_name = os.getenv("ALGORADAR_LOG_LEVEL", default).upper()
    level = getattr(logging, level_name, None)
    return level if isinstance(level, int) else logging.INFO


def _configure_logger(logger: logging.Logger, level: int) -> None:
    """
    Configure a logger with the given level and the shared stdout handler.

    The level is only applied when the logger has none of its own, so callers
    that already tuned a logger keep their setting. The shared handler is
    attached once and propagation is disabled to avoid duplicate lines when
    uvicorn installs its own root handlers.

    Parameters
    ----------
    logger : logging.Logger
        The logger instance to configure.
    level : int
        The logging level to set if the logger's level is not already set.
    """
    if logger.level == logging.NOTSET:
        logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(_DEFAULT_HANDLER)
    logger.propagate = False


def get_logger(name: str | None = None, level: int | None = None) -> logging.Logger:
    """Return a configured logger for the given name."""
    logger = logging.getLogger(name or _DEFAULT_LOGGER_NAME)
    _configure_logger(logger, _resolve_level() if level is None else level)
    return logger


def set_level(level: int, logger_names: list[str] | None = None) -> None:
    """Set the log level for one or more logger names and their existing children."""
    names = logger_names or [_DEFAULT_LOGGER_NAME, "uvicorn"]
    known = dict(logging.Logger.manager.loggerDict)
    for name in names:
        logging.getLogger(name).setLevel(level)
        for child_name, child in known.items():
            if child_name.startswith(f"{name}.") and isinstance(child, logging.Logger):
                child.setLevel(level)
