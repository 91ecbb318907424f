"""A log policy that appends messages to a file through a background writer."""

from __future__ import annotations

import os
import queue
import threading
from datetime import datetime
from typing import List, Optional, Union

from commonutils.log_policy import LogLevel, LogPolicy, level_tag, timestamp

_MAX_PENDING_BUFFERS = 16
_STOP = object()


def format_file_message(level: LogLevel, message: str, now: Optional[datetime] = None) -> str:
    """Format one log file line, including its trailing newline."""
    return f"[{timestamp(now)}] {level_tag(level)} {message}\n"


class FileLogPolicy(LogPolicy):
    """Collects lines in a buffer and hands full buffers to a writer thread.

    A buffer is handed over once it holds ``buffer_size`` lines, or on flush.
    At most sixteen buffers wait for the writer; further writes block.
    """

    def __init__(self, file_path: Union[str, os.PathLike], buffer_size: int = 65536) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        self.file_path = os.fspath(file_path)
        self._file = open(self.file_path, "a", encoding="utf-8")
        self._buffer_size = buffer_size
        self._buffer: List[str] = []
        self._lock = threading.Lock()
        self._closed = False
        self._pending: "queue.Queue[object]" = queue.Queue(maxsize=_MAX_PENDING_BUFFERS)
        self._thread = threading.Thread(target=self._write_to_file, name="FileLogPolicy", daemon=True)
        self._thread.start()

    def _write_to_file(self) -> None:
        while True:
            batch = self._pending.get()
            try:
                if batch is _STOP:
                    return
                self._file.write("".join(batch))
                self._file.flush()
            finally:
                self._pending.task_done()

    def _hand_off(self) -> None:
        if self._buffer:
            self._pending.put(self._buffer)
            self._buffer = []

    def write(self, level: LogLevel, message: str) -> None:
        line = format_file_message(level, message)
        with self._lock:
            if self._closed:
                raise RuntimeError("write on closed FileLogPolicy")
            self._buffer.append(line)
            if len(self._buffer) >= self._buffer_size:
                self._hand_off()

    def flush(self) -> None:
        """Hand over the current buffer and wait until the file holds it."""
        with self._lock:
            self._hand_off()
        self._pending.join()

    def close(self) -> None:
        """Write everything still buffered, stop the writer and close the file."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._hand_off()
            self._pending.put(_STOP)
        self._thread.join()
        self._file.close()