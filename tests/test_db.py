"""Tests for the key-value database layer."""

import pytest

import streakly.db as db_module
from streakly.db import init_db, get_blob, set_blob, get_updated_at
from streakly.errors import StorageError


@pytest.fixture(autouse=True)
def fresh_db(tmp_path, monkeypatch):
    """Ensure a fresh database for each test."""
    db_path = tmp_path / "test.db"
    monkeypatch.setattr(db_module, "DB_PATH", db_path)
    init_db()
    yield db_path


class TestBlobs:
    def test_missing_key(self):
        assert get_blob("habits") is None
        assert get_updated_at("habits") is None

    def test_set_and_get(self):
        set_blob("habits", "[]")
        assert get_blob("habits") == "[]"
        assert get_updated_at("habits") is not None

    def test_overwrite(self):
        set_blob("habits", "v1")
        set_blob("habits", "v2")
        assert get_blob("habits") == "v2"

    def test_key_isolation(self):
        set_blob("a", "1")
        set_blob("b", "2")
        assert get_blob("a") == "1"
        assert get_blob("b") == "2"

    def test_init_is_idempotent(self):
        set_blob("habits", "kept")
        init_db()
        assert get_blob("habits") == "kept"


class TestFailures:
    def test_unwritable_path_raises_storage_error(self, tmp_path, monkeypatch):
        # A directory where the database file should be
        bad = tmp_path / "dir.db"
        bad.mkdir()
        monkeypatch.setattr(db_module, "DB_PATH", bad)
        with pytest.raises(StorageError):
            set_blob("habits", "[]")
        with pytest.raises(StorageError):
            get_blob("habits")
