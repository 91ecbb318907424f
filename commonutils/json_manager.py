"""Load, navigate, edit and save JSON documents."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Union

_log = logging.getLogger(__name__)

Key = Union[str, int]


def _check_key(key: Key) -> None:
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise TypeError(f"JSON key must be str or int, not {type(key).__name__}")
    if isinstance(key, int) and key < 0:
        raise IndexError("JSON array index must not be negative")


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class JsonNode:
    """A live reference to the value stored under ``key`` in ``container``."""

    def __init__(self, container: Union[dict, list], key: Key) -> None:
        self._container = container
        self._key = key

    def _present(self) -> bool:
        if isinstance(self._container, dict):
            return self._key in self._container
        return self._key < len(self._container)

    def _store(self, value: Any) -> None:
        if isinstance(self._container, dict):
            self._container[self._key] = value
            return
        missing = self._key + 1 - len(self._container)
        if missing > 0:
            self._container.extend([None] * missing)
        self._container[self._key] = value

    def __getitem__(self, key: Key) -> "JsonNode":
        """Return the child node under ``key``, creating empty parents as needed."""
        _check_key(key)
        value = self._container[self._key] if self._present() else None
        if value is None:
            value = {} if isinstance(key, str) else []
            self._store(value)
        if isinstance(key, str):
            if not isinstance(value, dict):
                raise TypeError(f"cannot use a string key with {_type_name(value)}")
            if key not in value:
                _log.warning("Key does not exist: %s", key)
        else:
            if not isinstance(value, list):
                raise TypeError(f"cannot use an integer index with {_type_name(value)}")
            if key >= len(value):
                _log.warning("Array index out of range: %d", key)
        return JsonNode(value, key)

    def get(self) -> Any:
        """Return the stored value; raise KeyError or IndexError if absent."""
        if not self._present():
            if isinstance(self._container, dict):
                raise KeyError(self._key)
            raise IndexError(self._key)
        return self._container[self._key]

    def set(self, value: Any) -> None:
        """Store ``value`` here, extending an array with nulls if required."""
        self._store(value)

    def as_int(self) -> int:
        value = self.get()
        if isinstance(value, (bool, int, float)):
            return int(value)
        raise TypeError(f"type must be number, but is {_type_name(value)}")

    def as_float(self) -> float:
        value = self.get()
        if isinstance(value, (bool, int, float)):
            return float(value)
        raise TypeError(f"type must be number, but is {_type_name(value)}")

    def as_bool(self) -> bool:
        value = self.get()
        if isinstance(value, bool):
            return value
        raise TypeError(f"type must be boolean, but is {_type_name(value)}")

    def as_str(self) -> str:
        value = self.get()
        if isinstance(value, str):
            return value
        raise TypeError(f"type must be string, but is {_type_name(value)}")

    def exists(self, key: str) -> bool:
        """Return True if this node is an object holding ``key``."""
        value = self._container[self._key] if self._present() else None
        return isinstance(value, dict) and key in value


class JsonManager:
    """A JSON document loaded from a file."""

    def __init__(self, file_path: Union[str, os.PathLike]) -> None:
        with open(file_path, encoding="utf-8") as fh:
            data = json.load(fh)
        self._holder: list = [data]
        self._root = JsonNode(self._holder, 0)

    def __getitem__(self, key: Key) -> JsonNode:
        return self._root[key]

    def exists(self, key: str) -> bool:
        return self._root.exists(key)

    def save_to_file(self, file_path: Union[str, os.PathLike]) -> None:
        """Write the whole document with four-space indentation and sorted keys."""
        with open(file_path, "w", encoding="utf-8") as fh:
            json.dump(self._holder[0], fh, indent=4, sort_keys=True, ensure_ascii=False)