"""Utilities: a bounded message queue, a thread pool, JSON access, asynchronous logging, SQLite helpers and a TCP client and server."""

__version__ = "0.1.0"