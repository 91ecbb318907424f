"""Table creation, insertion, querying, updating and removal on a SQLite connection.

Table names, column names and conditions are inserted into the SQL text as
given; data values are bound as parameters.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Sequence

from commonutils.db_types import (
    DatabaseError,
    SQLiteDataType,
    SQLiteKeyType,
    SQLiteKeyValue,
    SQLiteQueryResult,
)


def _to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, float):
        text = format(value, ".15g")
        if not any(ch in text for ch in ".eEn"):
            text += ".0"
        return text
    return str(value)


def _run(conn: sqlite3.Connection, sql: str, params: Sequence[object] = ()) -> None:
    try:
        conn.execute(sql, tuple(params))
        conn.commit()
    except sqlite3.Error as exc:
        raise DatabaseError(f"{exc} (in: {sql})") from exc


def _column_list(columns: Iterable[str]) -> str:
    names = list(columns)
    if not names:
        raise ValueError("at least one column is required")
    return ", ".join(names)


def create_table(conn: sqlite3.Connection, table_name: str, columns: SQLiteKeyType) -> None:
    """Create ``table_name`` with the given columns unless it already exists."""
    if not columns:
        raise ValueError("at least one column is required")
    definitions = ", ".join(
        f"{name} {SQLiteDataType(kind).value}" for name, kind in sorted(columns.items())
    )
    _run(conn, f"CREATE TABLE IF NOT EXISTS {table_name} ({definitions});")


def insert(conn: sqlite3.Connection, table_name: str, data: SQLiteKeyValue) -> None:
    """Insert one row built from the column/value pairs in ``data``."""
    if not data:
        raise ValueError("at least one column is required")
    items = sorted(data.items())
    names = ", ".join(name for name, _ in items)
    marks = ", ".join("?" for _ in items)
    _run(
        conn,
        f"INSERT INTO {table_name} ({names}) VALUES ({marks});",
        [value for _, value in items],
    )


def execute_query(conn: sqlite3.Connection, sql: str) -> SQLiteQueryResult:
    """Run ``sql`` and return every row as a name-sorted dict of text values.

    NULL becomes the empty string.
    """
    try:
        cursor = conn.execute(sql)
        rows = cursor.fetchall()
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to prepare statement: {exc}") from exc
    if cursor.description is None:
        return []
    names = [column[0] for column in cursor.description]
    result: SQLiteQueryResult = []
    for row in rows:
        record = {name: _to_text(value) for name, value in zip(names, row)}
        result.append(dict(sorted(record.items())))
    return result


def query_all(conn: sqlite3.Connection, table_name: str) -> SQLiteQueryResult:
    """Return every column of every row in ``table_name``."""
    return execute_query(conn, f"SELECT * FROM {table_name};")


def query_columns(
    conn: sqlite3.Connection, table_name: str, columns: Iterable[str]
) -> SQLiteQueryResult:
    """Return the named columns of every row in ``table_name``."""
    return execute_query(conn, f"SELECT {_column_list(columns)} FROM {table_name};")


def query_columns_where(
    conn: sqlite3.Connection, table_name: str, columns: Iterable[str], condition: str
) -> SQLiteQueryResult:
    """Return the named columns of the rows matching ``condition``."""
    return execute_query(
        conn, f"SELECT {_column_list(columns)} FROM {table_name} WHERE {condition};"
    )


def update(
    conn: sqlite3.Connection, table_name: str, data: SQLiteKeyValue, condition: str
) -> None:
    """Set the columns in ``data`` on the rows matching ``condition``."""
    if not data:
        raise ValueError("at least one column is required")
    items = sorted(data.items())
    assignments = ", ".join(f"{name}=?" for name, _ in items)
    _run(
        conn,
        f"UPDATE {table_name} SET {assignments} WHERE {condition};",
        [value for _, value in items],
    )


def remove(conn: sqlite3.Connection, table_name: str, condition: str) -> None:
    """Delete the rows matching ``condition``."""
    _run(conn, f"DELETE FROM {table_name} WHERE {condition};")