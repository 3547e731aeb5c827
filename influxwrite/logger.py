"""Library-wide logging with level filtering and a replaceable global logger."""

from __future__ import annotations

import sys
import threading
from enum import IntEnum
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Log levels; each level also enables every level below it."""

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3


class Logger:
    """Default logger writing prefixed lines to a text stream.

    Messages are formatted with ``%`` when arguments are given.
    A ``stream`` of ``None`` means ``sys.stderr`` at the time of writing.
    """

    def __init__(
        self,
        prefix: str = "influxdb2client",
        level: int = LogLevel.ERROR,
        stream: TextIO | None = None,
    ) -> None:
        self.prefix = prefix
        self.level = LogLevel(level)
        self.stream = stream
        self._lock = threading.Lock()

    def _emit(self, threshold: LogLevel, tag: str, msg: str, args: tuple) -> None:
        with self._lock:
            if self.level < threshold:
                return
            text = msg % args if args else msg
            out = self.stream if self.stream is not None else sys.stderr
            out.write(f"{self.prefix} {tag}! {text}\n")
            flush = getattr(out, "flush", None)
            if flush is not None:
                flush()

    def debug(self, msg: str, *args: Any) -> None:
        """Write a debug message if the debug level is enabled."""
        self._emit(LogLevel.DEBUG, "D", msg, args)

    def info(self, msg: str, *args: Any) -> None:
        """Write an info message if the info level is enabled."""
        self._emit(LogLevel.INFO, "I", msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        """Write a warning message if the warning level is enabled."""
        self._emit(LogLevel.WARNING, "W", msg, args)

    def error(self, msg: str, *args: Any) -> None:
        """Write an error message; errors are always written."""
        self._emit(LogLevel.ERROR, "E", msg, args)


class _LoggerSlot:
    """Holds the library-wide logger behind a lock."""

    def __init__(self, logger: Any) -> None:
        self._lock = threading.Lock()
        self._logger = logger

    def get(self) -> Any:
        with self._lock:
            return self._logger

    def replace(self, logger: Any) -> Any:
        with self._lock:
            previous = self._logger
            self._logger = logger
            return previous


_slot = _LoggerSlot(Logger())


def get_logger() -> Any:
    """Return the library-wide logger, or ``None`` if logging is disabled."""
    return _slot.get()


def set_logger(logger: Any) -> Any:
    """Replace the library-wide logger; ``None`` disables logging.

    Returns the logger that was in place before.
    """
    return _slot.replace(logger)


def debug(msg: str, *args: Any) -> None:
    """Send a debug message to the current logger, if any."""
    current = _slot.get()
    if current is not None:
        current.debug(msg, *args)


def info(msg: str, *args: Any) -> None:
    """Send an info message to the current logger, if any."""
    current = _slot.get()
    if current is not None:
        current.info(msg, *args)


def warn(msg: str, *args: Any) -> None:
    """Send a warning message to the current logger, if any."""
    current = _slot.get()
    if current is not None:
        current.warn(msg, *args)


def error(msg: str, *args: Any) -> None:
    """Send an error message to the current logger, if any."""
    current = _slot.get()
    if current is not None:
        current.error(msg, *args)


def level() -> LogLevel:
    """Return the current logger's level, or ERROR if logging is disabled."""
    current = _slot.get()
    if current is not None:
        return LogLevel(current.level)
    return LogLevel.ERROR