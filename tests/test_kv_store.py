"""Tests for the SQLite key-value store."""

import sqlite3
from unittest.mock import MagicMock

from quillstack.stores.kv import KeyValueStore


class TestKeyValueStore:
    def test_missing_key_returns_default(self, kv_store):
        assert kv_store.get("rate.minute.count") == 0.0
        assert kv_store.get("rate.minute.count", default=-1.0) == -1.0

    def test_set_and_get(self, kv_store):
        kv_store.set("rate.minute.count", 3)
        assert kv_store.get("rate.minute.count") == 3.0

    def test_set_overwrites(self, kv_store):
        kv_store.set("cost.daily.calls", 1)
        kv_store.set("cost.daily.calls", 2)
        assert kv_store.get("cost.daily.calls") == 2.0

    def test_set_many(self, kv_store):
        kv_store.set_many({"a.x": 1.5, "a.y": 2.5})
        assert kv_store.get("a.x") == 1.5
        assert kv_store.get("a.y") == 2.5

    def test_get_prefix(self, kv_store):
        kv_store.set_many({"rate.minute.count": 1, "rate.hour.count": 2, "cost.daily.calls": 3})
        assert kv_store.get_prefix("rate.") == {"rate.hour.count": 2.0, "rate.minute.count": 1.0}

    def test_delete_prefix_is_literal(self, kv_store):
        kv_store.set_many({"rate.minute.count": 1, "ratex.other": 2, "cost.daily.calls": 3})
        kv_store.delete_prefix("rate.")
        assert kv_store.get_prefix("rate.") == {}
        assert kv_store.get("ratex.other") == 2.0
        assert kv_store.get("cost.daily.calls") == 3.0

    def test_underscore_not_wildcard(self, kv_store):
        kv_store.set_many({"a_b": 1, "axb": 2})
        assert kv_store.get_prefix("a_") == {"a_b": 1.0}

    def test_persists_across_reopen(self, tmp_path):
        path = tmp_path / "state.db"
        store = KeyValueStore(path)
        store.set("cost.lifetime.calls", 7)
        store.close()

        reopened = KeyValueStore(path)
        assert reopened.get("cost.lifetime.calls") == 7.0
        reopened.close()

    def test_creates_parent_directory(self, tmp_path):
        store = KeyValueStore(tmp_path / "nested" / "dir" / "state.db")
        store.set("k", 1)
        assert (tmp_path / "nested" / "dir" / "state.db").exists()
        store.close()

    def test_reconnects_after_database_error(self, kv_store):
        kv_store.set("k", 4)
        broken = MagicMock()
        broken.execute.side_effect = sqlite3.DatabaseError("disk I/O error")
        kv_store._conn = broken

        assert kv_store.get("k") == 4.0
        broken.close.assert_called_once()
