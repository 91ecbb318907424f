import re
import threading
import time
from datetime import datetime

import pytest

from commonutils.file_policy import FileLogPolicy, format_file_message
from commonutils.log_policy import LogLevel

LINE = re.compile(r"^\[\d{4}-\d\d-\d\d \d\d:\d\d:\d\d\.\d{3}\] \[(\w+)\] (.*)$")


def _lines(path):
    return path.read_text(encoding="utf-8").splitlines()


def test_format_file_message():
    now = datetime(2024, 1, 2, 3, 4, 5, 67000)
    assert format_file_message(LogLevel.WARNING, "disk", now) == (
        "[2024-01-02 03:04:05.067] [WARNING] disk\n"
    )


def test_format_has_single_trailing_newline():
    line = format_file_message(LogLevel.TRACE, "flow")
    assert line.endswith("\n") and line.count("\n") == 1
    assert LINE.match(line.rstrip("\n")).groups() == ("TRACE", "flow")


def test_flush_writes_to_file(tmp_path):
    path = tmp_path / "log.txt"
    policy = FileLogPolicy(path)
    policy.write(LogLevel.INFO, "Application started.")
    policy.write(LogLevel.ERROR, "An error occurred: file not found")
    policy.flush()
    parsed = [LINE.match(line).groups() for line in _lines(path)]
    assert parsed == [
        ("INFO", "Application started."),
        ("ERROR", "An error occurred: file not found"),
    ]
    policy.close()


def test_nothing_written_before_flush_with_large_buffer(tmp_path):
    path = tmp_path / "log.txt"
    policy = FileLogPolicy(path)
    policy.write(LogLevel.INFO, "buffered")
    assert path.read_text(encoding="utf-8") == ""
    policy.close()
    assert len(_lines(path)) == 1


def test_full_buffer_is_written_without_flush(tmp_path):
    path = tmp_path / "log.txt"
    policy = FileLogPolicy(path, buffer_size=2)
    policy.write(LogLevel.INFO, "a")
    policy.write(LogLevel.INFO, "b")
    deadline = time.monotonic() + 5
    while len(_lines(path)) < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    assert [LINE.match(line).group(2) for line in _lines(path)] == ["a", "b"]
    policy.close()


def test_close_writes_remaining(tmp_path):
    path = tmp_path / "log.txt"
    policy = FileLogPolicy(path, buffer_size=2)
    for i in range(5):
        policy.write(LogLevel.DEBUG, f"m{i}")
    policy.close()
    assert [LINE.match(line).group(2) for line in _lines(path)] == [f"m{i}" for i in range(5)]


def test_appends_to_existing_file(tmp_path):
    path = tmp_path / "log.txt"
    path.write_text("existing\n", encoding="utf-8")
    with FileLogPolicy(path) as policy:
        policy.write(LogLevel.INFO, "new")
    lines = _lines(path)
    assert lines[0] == "existing"
    assert LINE.match(lines[1]).group(2) == "new"


def test_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        FileLogPolicy(tmp_path / "missing" / "log.txt")


def test_buffer_size_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        FileLogPolicy(tmp_path / "log.txt", buffer_size=0)


def test_write_after_close_raises(tmp_path):
    policy = FileLogPolicy(tmp_path / "log.txt")
    policy.close()
    with pytest.raises(RuntimeError):
        policy.write(LogLevel.INFO, "late")


def test_concurrent_writers_lose_nothing(tmp_path):
    path = tmp_path / "log.txt"
    policy = FileLogPolicy(path, buffer_size=64)

    def worker(tid):
        for i in range(500):
            policy.write(LogLevel.INFO, f"Thread {tid}: Message {i}")

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    policy.close()
    messages = [LINE.match(line).group(2) for line in _lines(path)]
    assert len(messages) == 2000
    for tid in range(4):
        mine = [m for m in messages if m.startswith(f"Thread {tid}:")]
        assert mine == [f"Thread {tid}: Message {i}" for i in range(500)]