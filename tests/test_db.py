"""Tests for chronos.data.db — KeyValueDB (SQLite storage)."""

import pytest

from chronos.data.db import KeyValueDB
from chronos.ports.storage_port import StorageError


class TestKeyValueDB:
    def test_get_missing_returns_none(self, kv_db):
        assert kv_db.get("absent") is None

    def test_set_then_get(self, kv_db):
        kv_db.set("k", '{"a": 1}')
        assert kv_db.get("k") == '{"a": 1}'

    def test_set_overwrites(self, kv_db):
        kv_db.set("k", "first")
        kv_db.set("k", "second")
        assert kv_db.get("k") == "second"

    def test_delete(self, kv_db):
        kv_db.set("k", "v")
        assert kv_db.delete("k") is True
        assert kv_db.get("k") is None
        assert kv_db.delete("k") is False

    def test_persists_across_instances(self, tmp_db_path):
        KeyValueDB(db_path=tmp_db_path).set("k", "v")
        assert KeyValueDB(db_path=tmp_db_path).get("k") == "v"

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.db"
        KeyValueDB(db_path=str(path)).set("k", "v")
        assert path.exists()

    def test_sqlite_error_wrapped(self, kv_db):
        with kv_db._connect() as conn:
            conn.execute("DROP TABLE kv_store")
        with pytest.raises(StorageError):
            kv_db.get("k")
        with pytest.raises(StorageError):
            kv_db.set("k", "v")
