import pytest

from commonutils.db_types import DatabaseError, SQLiteDataType
from commonutils.sqlite_wrapper import SQLiteWrapper


@pytest.fixture
def paths(tmp_path):
    return tmp_path / "test.db", tmp_path / "test.log"


def test_source_wrapper_case(paths):
    db_path, log_path = paths
    with SQLiteWrapper(db_path, False, log_path) as db:
        columns = {
            "id": SQLiteDataType.INTEGER,
            "name": SQLiteDataType.TEXT,
            "age": SQLiteDataType.INTEGER,
        }
        db.create_table("users", columns)
        db.insert_data("users", {"name": "John Doe", "age": "30", "id": "1"})
        assert db.query_data("users") == [{"age": "30", "id": "1", "name": "John Doe"}]

        db.update_data("users", {"name": "Tom", "age": "31"}, "id=1")
        assert db.query_data("users") == [{"age": "31", "id": "1", "name": "Tom"}]

        db.delete_data("users", "id=1")
        assert db.query_data("users") == []

        db.delete_table("users")
        with pytest.raises(DatabaseError):
            db.query_data("users")


def test_data_persists_across_connections(paths):
    db_path, log_path = paths
    with SQLiteWrapper(db_path, log_file=log_path) as db:
        db.create_table("kv", {"k": SQLiteDataType.TEXT})
        db.insert_data("kv", {"k": "v"})
    with SQLiteWrapper(db_path, log_file=log_path) as db:
        assert db.query_data("kv") == [{"k": "v"}]


def test_open_is_logged(paths):
    db_path, log_path = paths
    SQLiteWrapper(db_path, log_file=log_path).close()
    assert "[INFO] Opened database successfully" in log_path.read_text(encoding="utf-8")


def test_delete_table_failure_is_logged_and_raised(paths):
    db_path, log_path = paths
    db = SQLiteWrapper(db_path, log_file=log_path)
    with pytest.raises(DatabaseError):
        db.delete_table("bad name")
    db.close()
    assert "[ERROR] Failed to delete table bad name" in log_path.read_text(encoding="utf-8")


def test_open_failure_raises(tmp_path):
    log_path = tmp_path / "open.log"
    with pytest.raises(DatabaseError):
        SQLiteWrapper(tmp_path / "missing" / "x.db", log_file=log_path)
    assert "Can't open database" in log_path.read_text(encoding="utf-8")


def test_without_log_file_no_log_written(tmp_path):
    with SQLiteWrapper(tmp_path / "a.db", log_file="") as db:
        db.create_table("t", {"a": SQLiteDataType.INTEGER})
        db.insert_data("t", {"a": "7"})
        assert db.query_data("t") == [{"a": "7"}]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a.db"]


def test_close_twice_is_harmless(paths):
    db_path, log_path = paths
    db = SQLiteWrapper(db_path, log_file=log_path)
    db.create_table("t", {"a": SQLiteDataType.INTEGER})
    db.insert_data("t", {"a": "3"})
    db.close()
    db.close()
    with pytest.raises(Exception):
        db.connection.execute("SELECT 1")
    with SQLiteWrapper(db_path, log_file=log_path) as reopened:
        assert reopened.query_data("t") == [{"a": "3"}]