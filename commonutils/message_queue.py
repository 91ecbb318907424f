"""A bounded, thread-safe FIFO message queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Generic, TypeVar

T = TypeVar("T")

_log = logging.getLogger(__name__)


class MessageQueue(Generic[T]):
    """Thread-safe FIFO queue holding at most ``max_message_count`` messages.

    When the queue is full, a push either drops the incoming message or, in
    coverage mode, drops the oldest queued message to make room.
    """

    def __init__(self, max_message_count: int = 1024, coverage_mode: bool = False) -> None:
        if max_message_count < 1:
            raise ValueError("max_message_count must be at least 1")
        self.max_message_count = max_message_count
        self.coverage_mode = coverage_mode
        self._queue: Deque[T] = deque()
        self._not_empty = threading.Condition()

    def push(self, msg: T) -> None:
        """Append a message, applying the overflow policy when full."""
        with self._not_empty:
            if len(self._queue) >= self.max_message_count:
                if self.coverage_mode:
                    _log.warning("MessageQueue is full, drop the oldest message.")
                    self._queue.popleft()
                else:
                    _log.warning("MessageQueue is full, drop the latest message.")
                    return
            self._queue.append(msg)
            self._not_empty.notify()

    def pop(self) -> T:
        """Remove and return the oldest message, blocking until one is available."""
        with self._not_empty:
            self._not_empty.wait_for(lambda: bool(self._queue))
            return self._queue.popleft()

    def empty(self) -> bool:
        """Return True if no messages are queued."""
        with self._not_empty:
            return not self._queue

    def __len__(self) -> int:
        with self._not_empty:
            return len(self._queue)