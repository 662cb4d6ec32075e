"""Tests for src.data.db — KeyValueDB (SQLite storage)."""

from src.data.db import KeyValueDB


class TestKeyValueDB:
    def test_missing_key_returns_none(self, kv_db):
        assert kv_db.get("profile") is None

    def test_set_and_get(self, kv_db):
        kv_db.set("profile", '{"a": 1}')
        assert kv_db.get("profile") == '{"a": 1}'

    def test_set_overwrites(self, kv_db):
        kv_db.set("goals", "[]")
        kv_db.set("goals", '[{"id": "x"}]')
        assert kv_db.get("goals") == '[{"id": "x"}]'
        assert kv_db.keys() == ["goals"]

    def test_delete(self, kv_db):
        kv_db.set("profile", "{}")
        kv_db.delete("profile")
        assert kv_db.get("profile") is None

    def test_delete_missing_is_noop(self, kv_db):
        kv_db.delete("nothing")
        assert kv_db.keys() == []

    def test_unicode_roundtrip(self, kv_db):
        kv_db.set("profile", '{"country": "日本"}')
        assert kv_db.get("profile") == '{"country": "日本"}'

    def test_persists_across_instances(self, tmp_db_path):
        KeyValueDB(db_path=tmp_db_path).set("habit_log", "[]")
        assert KeyValueDB(db_path=tmp_db_path).get("habit_log") == "[]"

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "lifetune.db"
        KeyValueDB(db_path=str(path)).set("k", "v")
        assert path.exists()

    def test_in_memory_database(self):
        db = KeyValueDB(db_path=":memory:")
        db.set("k", "v")
        assert db.get("k") == "v"
