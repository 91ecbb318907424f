"""A SQLite database handle with logging of its own operations."""

from __future__ import annotations

import os
import sqlite3
from typing import Optional, Union

from commonutils import model
from commonutils.console_policy import ConsoleLogPolicy
from commonutils.db_types import (
    DatabaseError,
    SQLiteKeyType,
    SQLiteKeyValue,
    SQLiteQueryResult,
)
from commonutils.file_policy import FileLogPolicy
from commonutils.logger import Logger

PathLike = Union[str, "os.PathLike[str]"]


class SQLiteWrapper:
    """Opens a SQLite database file and offers table and row operations.

    Messages go to the console when ``console_logger`` is true and to
    ``log_file`` unless it is empty or None.
    """

    def __init__(
        self,
        db_file_name: PathLike,
        console_logger: bool = False,
        log_file: Optional[PathLike] = "DataBase.log",
    ) -> None:
        self._logger = Logger()
        if console_logger:
            self._logger.add_policy(ConsoleLogPolicy())
        if log_file:
            self._logger.add_policy(FileLogPolicy(log_file))
        name = os.fspath(db_file_name)
        try:
            self._conn = sqlite3.connect(name, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as exc:
            self._logger.error("Can't open database:{}", name)
            self._logger.error("SQL error:{}", exc)
            self._logger.close()
            raise DatabaseError(f"Can't open database {name}: {exc}") from exc
        self._closed = False
        self._logger.info("Opened database successfully")

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def create_table(self, table_name: str, columns: SQLiteKeyType) -> None:
        model.create_table(self._conn, table_name, columns)

    def delete_table(self, table_name: str) -> None:
        """Drop ``table_name`` if it exists."""
        try:
            self._conn.execute(f"DROP TABLE IF EXISTS {table_name};")
        except sqlite3.Error as exc:
            self._logger.error("Failed to delete table {}: {}", table_name, exc)
            raise DatabaseError(f"Failed to delete table {table_name}: {exc}") from exc

    def insert_data(self, table_name: str, data: SQLiteKeyValue) -> None:
        model.insert(self._conn, table_name, data)

    def delete_data(self, table_name: str, condition: str) -> None:
        model.remove(self._conn, table_name, condition)

    def update_data(self, table_name: str, data: SQLiteKeyValue, condition: str) -> None:
        model.update(self._conn, table_name, data, condition)

    def query_data(self, table_name: str) -> SQLiteQueryResult:
        return model.query_all(self._conn, table_name)

    def close(self) -> None:
        """Flush and close the log, then close the database."""
        if self._closed:
            return
        self._closed = True
        self._logger.flush()
        self._logger.close()
        self._conn.close()

    def __enter__(self) -> "SQLiteWrapper":
        return self

    def __exit__(self, *args) -> None:
        self.close()