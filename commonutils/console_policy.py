"""A log policy that prints messages to a text stream from a background thread."""

from __future__ import annotations

import queue
import sys
import threading
from datetime import datetime
from typing import Optional, TextIO

from commonutils.log_policy import LogLevel, LogPolicy, level_tag, timestamp

_RESET = "\033[0m"
_TIME_COLOR = "\033[32m"
_LEVEL_COLORS = {
    LogLevel.TRACE: "\033[36m",
    LogLevel.DEBUG: "\033[34m",
    LogLevel.INFO: "\033[32m",
    LogLevel.WARNING: "\033[33m",
    LogLevel.ERROR: "\033[31m",
}
_STOP = object()


def format_console_message(
    level: LogLevel,
    message: str,
    colored: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """Format one console line, with ANSI colours when ``colored`` is true."""
    level = LogLevel(level)
    stamp = timestamp(now)
    tag = level_tag(level)
    if colored:
        return (
            f"{_TIME_COLOR}[{stamp}]{_RESET} "
            f"{_LEVEL_COLORS[level]}{tag} {_RESET}{message}"
        )
    return f"[{stamp}] {tag} {message}"


class ConsoleLogPolicy(LogPolicy):
    """Writes messages, one per line, to ``stream`` (standard output by default).

    Colours are used by default on Linux terminals only.
    """

    def __init__(self, stream: Optional[TextIO] = None, colored: Optional[bool] = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._colored = sys.platform.startswith("linux") if colored is None else colored
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._stream_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="ConsoleLogPolicy", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                level, message, now = item
                line = format_console_message(level, message, self._colored, now)
                with self._stream_lock:
                    self._stream.write(line + "\n")
            finally:
                self._queue.task_done()

    def write(self, level: LogLevel, message: str) -> None:
        with self._state_lock:
            if self._closed:
                raise RuntimeError("write on closed ConsoleLogPolicy")
            self._queue.put((level, message, datetime.now()))

    def flush(self) -> None:
        """Wait until every queued message is printed, then flush the stream."""
        self._queue.join()
        with self._stream_lock:
            self._stream.flush()

    def close(self) -> None:
        """Print the remaining messages and stop the background thread."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._thread.join()
        with self._stream_lock:
            self._stream.flush()