"""Tests for the SQLAlchemy key/value store."""

import pytest

from givingbook.database.base import Store
from givingbook.database.factories import create_sqlite_store


def test_store_is_store(temp_db):
    """Test the SQLite store implements the Store interface."""
    assert isinstance(temp_db, Store)


def test_get_missing(temp_db):
    """Test a missing key reads as None."""
    assert temp_db.get("nothing") is None


def test_set_and_get(temp_db):
    """Test values round trip and overwrite."""
    temp_db.set("members", "[]")
    temp_db.set("members", '[{"id": "a"}]')

    assert temp_db.get("members") == '[{"id": "a"}]'


def test_delete(temp_db):
    """Test deleting reports whether the key existed."""
    temp_db.set("a", "1")

    assert temp_db.delete("a") is True
    assert temp_db.delete("a") is False
    assert temp_db.get("a") is None


def test_enumerate_keys_prefix_is_literal(temp_db):
    """Test the prefix filter treats "_" literally."""
    temp_db.set("service_2024-01-14_Sunday Morning", "[]")
    temp_db.set("serviceX2024", "[]")
    temp_db.set("members", "[]")

    assert temp_db.enumerate_keys(prefix="service_") == ["service_2024-01-14_Sunday Morning"]
    assert temp_db.enumerate_keys() == ["members", "serviceX2024", "service_2024-01-14_Sunday Morning"]


def test_values_persist_across_stores(temp_db):
    """Test a second store on the same file sees committed values."""
    temp_db.set("members", "[]")

    other = create_sqlite_store(database_path=temp_db.database_path)
    try:
        assert other.get("members") == "[]"
        other.set("members", '["x"]')
    finally:
        other.disconnect()

    assert temp_db.get("members") == '["x"]'


def test_store_path_from_environment(tmp_path, monkeypatch):
    """Test GIVINGBOOK_DB_PATH selects the database file."""
    db_path = tmp_path / "env.db"
    monkeypatch.setenv("GIVINGBOOK_DB_PATH", str(db_path))

    store = create_sqlite_store()
    try:
        store.set("k", "v")
    finally:
        store.disconnect()

    assert db_path.exists()


def test_delete_rolls_back_on_failed_commit(temp_db, monkeypatch):
    """Test a failed delete leaves the value in place."""
    temp_db.set("a", "1")
    session = temp_db._get_session()

    def failing_commit():
        raise RuntimeError("disk full")

    monkeypatch.setattr(session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        temp_db.delete("a")
    monkeypatch.undo()

    assert temp_db.get("a") == "1"
