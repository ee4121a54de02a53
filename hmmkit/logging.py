"""Logging utilities for hmmkit.

Provides namespaced loggers with a single stderr handler and helpers to
adjust verbosity for every logger the package has handed out.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached so repeated calls never stack handlers. Names outside
    the ``hmmkit`` namespace are prefixed with ``hmmkit.``.

    Args:
        name: Logger name (typically ``__name__``). If None, returns the
            package logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from hmmkit.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Filling trellis")
    """
    if name is None:
        name = "hmmkit"

    if name == "hmmkit" or name.startswith("hmmkit."):
        logger_name = name
    else:
        logger_name = f"hmmkit.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))

        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all hmmkit loggers.

    Args:
        level: Logging level (``logging.DEBUG``, ``logging.INFO``, etc.) or a
            level name such as ``"DEBUG"``. Unknown names fall back to WARNING.
    """
    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Configure logging for hmmkit.

    Replaces the handler of every cached logger with a fresh stream handler.
    Intended to be called once at application startup.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses
            ``[LEVEL] name: message``.
        stream: Output stream (default: sys.stderr).
    """
    level = _resolve_level(level)

    if stream is None:
        stream = sys.stderr

    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level
