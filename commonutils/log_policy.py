"""Log levels and the interface every log output implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    """Severity of a log message, from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


def level_tag(level: LogLevel) -> str:
    """Return the bracketed tag for ``level``, e.g. ``[INFO]``."""
    return f"[{LogLevel(level).name}]"


def timestamp(now: Optional[datetime] = None) -> str:
    """Format ``now`` (default: the current local time) with millisecond precision."""
    if now is None:
        now = datetime.now()
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d}"


class LogPolicy(ABC):
    """A destination that log messages are written to."""

    @abstractmethod
    def write(self, level: LogLevel, message: str) -> None:
        """Record one message."""

    @abstractmethod
    def flush(self) -> None:
        """Push any buffered messages to their destination."""

    def close(self) -> None:
        """Release the destination; the default only flushes."""
        self.flush()

    def __enter__(self) -> "LogPolicy":
        return self

    def __exit__(self, *args) -> None:
        self.close()