# commonutils

A small set of utilities for everyday programs. It uses only the standard library.

| Module | What it provides |
| --- | --- |
| `commonutils.message_queue` | `MessageQueue`: a thread-safe bounded FIFO queue |
| `commonutils.thread_pool` | `ThreadPool`: worker threads fed by a bounded task queue |
| `commonutils.json_manager` | `JsonManager`, `JsonNode`: load, navigate, edit and save a JSON file |
| `commonutils.log_policy` | `LogLevel`, the abstract `LogPolicy`, `level_tag`, `timestamp` |
| `commonutils.console_policy` | `ConsoleLogPolicy`, `format_console_message` |
| `commonutils.file_policy` | `FileLogPolicy`, `format_file_message` |
| `commonutils.logger` | `Logger`, `format_message` |
| `commonutils.db_types` | `SQLiteDataType`, `DatabaseError` |
| `commonutils.model` | functions for creating tables and inserting, querying, updating and removing rows on a `sqlite3` connection |
| `commonutils.sqlite_wrapper` | `SQLiteWrapper`: a database file together with a logger |
| `commonutils.tcp_types` | `IPType`, `TCPClient`, `TCPMessage`, `TCPError` |
| `commonutils.tcp_client` | `SingleTCPClient`: a blocking client that holds one connection |
| `commonutils.tcp_server` | `AsyncTCPServer`: accepts and reads clients on a background thread |

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Message queue

`MessageQueue(max_message_count=1024, coverage_mode=False)` holds at most `max_message_count` items. When the queue is full, `push` drops the new item. In coverage mode it drops the oldest item to make room instead. `pop` blocks until an item is available. `empty()` and `len()` report the current size.

```python
from commonutils.message_queue import MessageQueue

queue = MessageQueue(max_message_count=2, coverage_mode=True)
for n in (1, 2, 3):
    queue.push(n)
while not queue.empty():
    print(queue.pop())   # 2, then 3
```

## Thread pool

`ThreadPool(threads_num=16, max_task_num=65536)` starts its worker threads straight away.

- `enqueue(task)` blocks while `max_task_num` tasks are already waiting.
- An exception raised by a task is logged through the `logging` module. It does not stop the worker.
- `shutdown()` stops the pool from accepting new tasks, runs the tasks still queued, and joins the workers. Leaving a `with` block calls `shutdown()`.
- Calling `enqueue` after shutdown raises `RuntimeError`.

```python
from commonutils.thread_pool import ThreadPool

with ThreadPool(threads_num=4, max_task_num=100) as pool:
    for i in range(10):
        pool.enqueue(lambda i=i: print("task", i))
```

## JSON

`JsonManager(path)` loads a file. A missing file or invalid JSON raises the usual `OSError` or `json.JSONDecodeError`.

Indexing with a string or a non-negative integer returns a `JsonNode`. A node is a live reference into the document:

- `get()` returns the stored value. It raises `KeyError` or `IndexError` if the value is absent.
- `as_int()`, `as_float()`, `as_bool()` and `as_str()` convert the value. They raise `TypeError` on a mismatched type.
- `set(value)` stores a value. It extends an array with nulls when needed.
- `exists(key)` tells whether an object holds a key.

Indexing into a missing or null value creates an empty object or array there. A key or index that is not present yet is logged as a warning.

`save_to_file(path)` writes the whole document with four-space indentation and sorted keys.

```python
from commonutils.json_manager import JsonManager

doc = JsonManager("settings.json")
print(doc["name"].as_str())
print(doc["array"][0].as_int())
doc["array"][0].set(20)
doc.save_to_file("settings_new.json")
```

## Logging

### Logger

`Logger(flush_interval=0.5)` queues messages. A background thread writes each message to every added policy, and a second thread flushes the policies every `flush_interval` seconds.

- `log(level, fmt, *args)` queues one message. So do the shortcuts `trace`, `debug`, `info`, `warning` and `error`.
- In `fmt`, each `{}` is replaced by the next argument, in order (see `format_message`). Extra arguments are ignored, and unfilled placeholders stay as they are.
- `flush()` waits until queued messages have reached the policies, then flushes them.
- `close()` delivers what is still queued, stops the threads, and flushes and closes every policy. Leaving a `with` block calls `close()`.
- Logging after `close()` raises `RuntimeError`.

### Policies

Both policies format lines as `[YYYY-MM-DD HH:MM:SS.mmm] [LEVEL] message`.

- `ConsoleLogPolicy(stream=None, colored=None)` prints lines to `stream`, which is standard output by default, from a background thread. Lines use ANSI colours when `colored` is true. By default that is on Linux only.
- `FileLogPolicy(file_path, buffer_size=65536)` appends to the file. A writer thread receives a buffer of lines once it holds `buffer_size` lines, or on `flush()`. At most sixteen buffers wait for the writer.

To write your own destination, subclass `LogPolicy` and implement `write(level, message)` and `flush()`.

```python
from commonutils.logger import Logger
from commonutils.console_policy import ConsoleLogPolicy
from commonutils.file_policy import FileLogPolicy

with Logger() as log:
    log.add_policy(ConsoleLogPolicy())
    log.add_policy(FileLogPolicy("app.log"))
    log.info("Application started.")
    log.debug("Debugging with value: {}, {}", 42, 66)
    log.error("An error occurred: {}", "file not found")
```

## SQLite

### Functions in `commonutils.model`

Each function takes a `sqlite3.Connection`:

- `create_table(conn, table_name, columns)`
- `insert(conn, table_name, data)`
- `execute_query(conn, sql)`
- `query_all(conn, table_name)`
- `query_columns(conn, table_name, columns)`
- `query_columns_where(conn, table_name, columns, condition)`
- `update(conn, table_name, data, condition)`
- `remove(conn, table_name, condition)`

Behaviour:

- Column types are given as `SQLiteDataType` members.
- Data values are bound as parameters.
- Queries return a list of dicts. Each dict maps column names, sorted, to text values, and NULL becomes `""`.
- A failing statement raises `DatabaseError`.
- An empty column or data mapping raises `ValueError`.

### SQLiteWrapper

`SQLiteWrapper(db_file_name, console_logger=False, log_file="DataBase.log")` opens the database and logs its own messages. It logs to the console when `console_logger` is true, and to `log_file` unless that is empty or `None`.

It offers `create_table`, `delete_table`, `insert_data`, `delete_data`, `update_data` and `query_data`, plus the `connection` property. `close()` flushes the log and closes the database. Leaving a `with` block calls `close()`.

```python
from commonutils.db_types import SQLiteDataType
from commonutils.sqlite_wrapper import SQLiteWrapper

with SQLiteWrapper("app.db", console_logger=False, log_file="") as db:
    db.create_table("users", {"id": SQLiteDataType.INTEGER, "name": SQLiteDataType.TEXT})
    db.insert_data("users", {"id": "1", "name": "John Doe"})
    db.update_data("users", {"name": "Tom"}, "id=1")
    print(db.query_data("users"))   # [{'id': '1', 'name': 'Tom'}]
    db.delete_data("users", "id=1")
    db.delete_table("users")
```

## TCP

### SingleTCPClient

`SingleTCPClient(server_address="127.0.0.1", port=1717, ip_type=IPType.IPV4)` holds one connection.

- `connect()` resolves the address and connects.
- `send(data)` sends all of the data. Text is encoded as UTF-8.
- `receive()` blocks until at least one byte arrives and returns the bytes read.
- `close()` closes the connection.

Failures raise `TCPError`. Sending empty data raises `ValueError`.

### AsyncTCPServer

`AsyncTCPServer(port=1717, server_address="127.0.0.1", ip_type=IPType.IPV4, max_clients=1024)` binds on construction. Port `0` picks a free port, which is then available as `server.port`.

- `start()` begins listening and runs the accept/read loop on a background thread.
- Each chunk a client sends is queued as a `TCPMessage` with `client`, `data` (bytes) and `time`.
- `get_message()` returns the oldest message, or `None` when there is none.
- `send(data, client)` and `receive(client)` talk to one client.
- `post_close_client(client)` closes a client on the I/O thread.
- `clients` lists the open connections.
- `close()` stops the server and closes every client.

```python
import time

from commonutils.tcp_client import SingleTCPClient
from commonutils.tcp_server import AsyncTCPServer

with AsyncTCPServer(port=0, server_address="127.0.0.1") as server:
    server.start()
    with SingleTCPClient("127.0.0.1", server.port) as client:
        client.connect()
        client.send("hello")
        message = None
        while message is None:
            time.sleep(0.01)
            message = server.get_message()
        print(message.data)              # b'hello'
        server.send("Hello from server", message.client)
        print(client.receive())          # b'Hello from server'
```

## What this package does not do

- It is a library only. It installs no command-line programs.
- The SQLite helpers insert table names, column names and conditions into the SQL text as given. Only data values are bound as parameters, so never pass untrusted text as a name or a condition.
- The TCP classes move raw bytes. There is no message framing: one `TCPMessage` holds whatever a single read returned, at most 1024 bytes.