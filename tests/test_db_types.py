import pytest

from commonutils.db_types import DatabaseError, SQLiteDataType


def test_none_type_is_spelled_null():
    assert SQLiteDataType("NULL") is SQLiteDataType.NONE


@pytest.mark.parametrize("member", list(SQLiteDataType))
def test_lookup_by_value_round_trips(member):
    assert SQLiteDataType(member.value) is member


def test_member_order_matches_declaration():
    looked_up = [SQLiteDataType(v) for v in ("INTEGER", "REAL", "TEXT", "BLOB", "NULL")]
    assert looked_up == list(SQLiteDataType)


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        SQLiteDataType("VARCHAR")


def test_database_error_carries_message_and_is_runtime_error():
    error = DatabaseError("boom")
    assert str(error) == "boom"
    assert isinstance(error, RuntimeError)