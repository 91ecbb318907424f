"""An asynchronous logger that fans messages out to a set of policies."""

from __future__ import annotations

import logging
import queue
import threading
from typing import List

from commonutils.log_policy import LogLevel, LogPolicy

_log = logging.getLogger(__name__)
_STOP = object()


def format_message(fmt: str, *args: object) -> str:
    """Replace each ``{}`` in ``fmt`` with the next argument, in order.

    Arguments beyond the last placeholder are ignored; placeholders beyond
    the last argument are left as they are.
    """
    parts: List[str] = []
    rest = fmt
    for value in args:
        head, sep, tail = rest.partition("{}")
        if not sep:
            break
        parts.append(head)
        parts.append(str(value))
        rest = tail
    parts.append(rest)
    return "".join(parts)


class Logger:
    """Queues messages and writes them to every policy on a background thread.

    A second thread flushes the policies every ``flush_interval`` seconds.
    Closing the logger writes all queued messages, then flushes and closes
    its policies.
    """

    def __init__(self, flush_interval: float = 0.5) -> None:
        if flush_interval <= 0:
            raise ValueError("flush_interval must be positive")
        self._flush_interval = flush_interval
        self._policies: List[LogPolicy] = []
        self._policies_lock = threading.Lock()
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._state_lock = threading.Lock()
        self._closed = False
        self._stop = threading.Event()
        self._worker = threading.Thread(target=self._process_queue, name="Logger", daemon=True)
        self._timer = threading.Thread(target=self._timer_task, name="LoggerTimer", daemon=True)
        self._worker.start()
        self._timer.start()

    def _snapshot(self) -> List[LogPolicy]:
        with self._policies_lock:
            return list(self._policies)

    def add_policy(self, policy: LogPolicy) -> None:
        with self._policies_lock:
            self._policies.append(policy)

    def _flush_policies(self) -> None:
        for policy in self._snapshot():
            policy.flush()

    def flush(self) -> None:
        """Wait until queued messages reach the policies, then flush them."""
        self._queue.join()
        self._flush_policies()

    def log(self, level: LogLevel, fmt: str, *args: object) -> None:
        message = format_message(fmt, *args)
        level = LogLevel(level)
        with self._state_lock:
            if self._closed:
                raise RuntimeError("log on closed Logger")
            self._queue.put((level, message))

    def trace(self, fmt: str, *args: object) -> None:
        self.log(LogLevel.TRACE, fmt, *args)

    def debug(self, fmt: str, *args: object) -> None:
        self.log(LogLevel.DEBUG, fmt, *args)

    def info(self, fmt: str, *args: object) -> None:
        self.log(LogLevel.INFO, fmt, *args)

    def warning(self, fmt: str, *args: object) -> None:
        self.log(LogLevel.WARNING, fmt, *args)

    def error(self, fmt: str, *args: object) -> None:
        self.log(LogLevel.ERROR, fmt, *args)

    def _process_queue(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                level, message = item
                for policy in self._snapshot():
                    try:
                        policy.write(level, message)
                    except Exception:
                        _log.exception("Log policy failed to write")
            finally:
                self._queue.task_done()

    def _timer_task(self) -> None:
        while not self._stop.wait(self._flush_interval):
            try:
                self._flush_policies()
            except Exception:
                _log.exception("Log policy failed to flush")

    def close(self) -> None:
        """Deliver queued messages, stop the threads and close the policies."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._stop.set()
        self._worker.join()
        self._timer.join()
        for policy in self._snapshot():
            policy.flush()
            policy.close()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *args) -> None:
        self.close()