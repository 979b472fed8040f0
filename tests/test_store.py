"""Tests for the SQLite cache store."""

import pytest

from haulbooks.storage.factories import create_sqlite_store


def test_read_absent_collection(temp_store):
    assert temp_store.read("transactions") is None


def test_write_and_read(temp_store):
    temp_store.write("trucks", [{"id": "truck-1"}])
    assert temp_store.read("trucks") == [{"id": "truck-1"}]


def test_write_replaces_collection(temp_store):
    temp_store.write("trucks", [{"id": "truck-1"}])
    temp_store.write("trucks", [])
    assert temp_store.read("trucks") == []


def test_clear_and_list(temp_store):
    temp_store.write("trucks", [])
    temp_store.write("accounts", [{"id": "acc-1"}])
    assert temp_store.list_collections() == ["accounts", "trucks"]

    temp_store.clear("trucks")
    temp_store.clear("never-written")
    assert temp_store.list_collections() == ["accounts"]
    assert temp_store.read("trucks") is None


def test_persists_across_stores(temp_store):
    temp_store.write("loads", [{"id": "l1"}])

    other = create_sqlite_store(database_path=temp_store.database_path)
    try:
        assert other.read("loads") == [{"id": "l1"}]
    finally:
        other.disconnect()


def test_non_list_payload_rejected(temp_store):
    from haulbooks.storage.models import CacheEntry

    session = temp_store._get_session()
    session.add(CacheEntry(key="broken", payload='{"id": 1}'))
    session.commit()

    with pytest.raises(ValueError):
        temp_store.read("broken")


def test_env_var_path(monkeypatch, tmp_path):
    path = tmp_path / "env.db"
    monkeypatch.setenv("HAULBOOKS_DB_PATH", str(path))
    store = create_sqlite_store()
    assert store.database_url == f"sqlite:///{path}"
