import threading
import time

import pytest

from commonutils.message_queue import MessageQueue
from commonutils.thread_pool import ThreadPool


def test_twenty_tasks_of_five_steps_complete():
    steps = MessageQueue(1000)

    def example_task(task_id):
        for _ in range(5):
            steps.push(task_id)

    pool = ThreadPool(10)
    for i in range(1, 21):
        pool.enqueue(lambda i=i: example_task(i))
    pool.shutdown()
    assert len(steps) == 100
    seen = sorted(steps.pop() for _ in range(100))
    assert seen == sorted(i for i in range(1, 21) for _ in range(5))


def test_context_manager_runs_all_tasks():
    results = MessageQueue(1000)
    with ThreadPool(4) as pool:
        for i in range(50):
            pool.enqueue(lambda i=i: results.push(i))
    assert len(results) == 50
    assert sorted(results.pop() for _ in range(50)) == list(range(50))


def test_enqueue_after_shutdown_raises():
    pool = ThreadPool(2)
    pool.shutdown()
    with pytest.raises(RuntimeError, match="stopped ThreadPool"):
        pool.enqueue(lambda: None)


def test_shutdown_drains_queued_tasks_in_order():
    gate = threading.Event()
    started = threading.Event()
    order = []
    pool = ThreadPool(1)

    def blocker():
        started.set()
        gate.wait()

    pool.enqueue(blocker)
    assert started.wait(2)
    for i in range(5):
        pool.enqueue(lambda i=i: order.append(i))
    gate.set()
    pool.shutdown()
    assert order == [0, 1, 2, 3, 4]


def test_enqueue_blocks_when_queue_full():
    gate = threading.Event()
    started = threading.Event()
    signals = MessageQueue()
    pool = ThreadPool(1, 1)
    try:
        def blocker():
            started.set()
            gate.wait()

        pool.enqueue(blocker)
        assert started.wait(2)
        pool.enqueue(lambda: None)

        def producer():
            pool.enqueue(lambda: None)
            signals.push("done")

        thread = threading.Thread(target=producer)
        thread.start()
        time.sleep(0.2)
        assert len(signals) == 0
        gate.set()
        thread.join(timeout=2)
        assert len(signals) == 1
        assert signals.pop() == "done"
    finally:
        gate.set()
        pool.shutdown()


def test_failing_task_does_not_stop_worker():
    ran = []
    pool = ThreadPool(1)

    def boom():
        raise ValueError("boom")

    pool.enqueue(boom)
    pool.enqueue(lambda: ran.append("after"))
    pool.shutdown()
    assert ran == ["after"]


def test_invalid_max_task_num_rejected():
    with pytest.raises(ValueError):
        ThreadPool(1, 0)