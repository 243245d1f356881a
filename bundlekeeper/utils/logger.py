"""
Loggers under the ``bundlekeeper`` namespace.

``-v`` maps to INFO and ``-vv`` to DEBUG. A ``TRACE`` level below DEBUG
carries resolution records and archive walking and is enabled by ``-vvv``.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Any, Optional

from bundlekeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

#: Numeric value of the TRACE level.
TRACE: int = 5

logging.addLevelName(TRACE, "TRACE")

_ROOT_NAME = "bundlekeeper"
_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter with optional ANSI color support."""

    COLORS = {
        "TRACE": "\033[2m",
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color and self._should_use_color():
            color = self.COLORS.get(record.levelname)
            if color:
                record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure logging for bundlekeeper.

    Safe to call multiple times; configuration is protected by a
    process-wide lock and previous handlers are replaced.

    Args:
        level: Logging level (``TRACE``, ``logging.DEBUG``, ...).
        verbose: Enable verbose formatting with timestamps.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(_ROOT_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)

        fmt = LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT
        formatter = ColoredFormatter(
            fmt,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the bundlekeeper namespace.

    Args:
        name: Logger name, relative (``"collector"``) or absolute
            (``"bundlekeeper.core.collector"``).

    Returns:
        A logger instance under the ``bundlekeeper`` hierarchy.
    """
    if not name or name == _ROOT_NAME:
        logger = logging.getLogger(_ROOT_NAME)
    elif name.startswith(f"{_ROOT_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{_ROOT_NAME}.{name}")

    # Library-safe behavior when logging is not configured
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def trace(logger: logging.Logger, msg: str, *args: Any) -> None:
    """Emit ``msg`` at ``TRACE`` level on ``logger``."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args)


def level_for_verbosity(verbose: int) -> int:
    """Map the CLI ``-v`` count to a logging level."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    if verbose == 2:
        return logging.DEBUG
    return TRACE


def is_logging_configured() -> bool:
    """Return True if bundlekeeper logging has been configured."""
    return _logging_configured


def disable_logging() -> None:
    """Disable all bundlekeeper logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(_ROOT_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
