"""Column types, result shapes and errors shared by the SQLite helpers."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Mapping


class SQLiteDataType(Enum):
    """Declared type of a table column; the value is its SQL spelling."""

    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"
    NONE = "NULL"


class DatabaseError(RuntimeError):
    """Raised when a database operation fails."""


SQLiteKeyType = Mapping[str, SQLiteDataType]
SQLiteKeyValue = Mapping[str, object]
SQLiteRow = Dict[str, str]
SQLiteQueryResult = List[SQLiteRow]