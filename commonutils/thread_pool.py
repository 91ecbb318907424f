"""A fixed-size pool of worker threads fed from a bounded task queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque

_log = logging.getLogger(__name__)


class ThreadPool:
    """Runs submitted callables on ``threads_num`` worker threads.

    At most ``max_task_num`` tasks may wait in the queue; ``enqueue`` blocks
    while the queue is full. On shutdown, queued tasks are still run before
    the workers exit.
    """

    def __init__(self, threads_num: int = 16, max_task_num: int = 65536) -> None:
        if max_task_num < 1:
            raise ValueError("max_task_num must be at least 1")
        self._max_task_num = max_task_num
        self._tasks: Deque[Callable[[], object]] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._stopped = False
        self._workers = [
            threading.Thread(target=self._work, name=f"ThreadPool-{i}", daemon=True)
            for i in range(threads_num)
        ]
        for worker in self._workers:
            worker.start()

    def _work(self) -> None:
        while True:
            with self._not_empty:
                while not self._stopped and not self._tasks:
                    self._not_empty.wait()
                if not self._tasks:
                    return
                task = self._tasks.popleft()
                self._not_full.notify()
            try:
                task()
            except Exception:
                _log.exception("Task raised an exception")

    def enqueue(self, task: Callable[[], object]) -> None:
        """Queue a task, waiting for room if the queue is full."""
        with self._not_full:
            if self._stopped:
                raise RuntimeError("Enqueue on stopped ThreadPool")
            while len(self._tasks) >= self._max_task_num and not self._stopped:
                self._not_full.wait()
            if self._stopped:
                raise RuntimeError("Enqueue on stopped ThreadPool")
            self._tasks.append(task)
            self._not_empty.notify()

    def shutdown(self) -> None:
        """Stop accepting tasks, run the queued ones and join the workers."""
        with self._lock:
            self._stopped = True
            self._not_empty.notify_all()
            self._not_full.notify_all()
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()