"""Tests for the JSON cache codec."""

import json
import stat
from unittest.mock import patch

import pytest

from todoist_cli.adapters import cache_file
from todoist_cli.exceptions import (
    CacheCorruptedError,
    CacheError,
    CacheNotFoundError,
    CacheWriteError,
)
from todoist_cli.models import Due, Label, LocalStore, Note, Project, Task


@pytest.fixture()
def store():
    s = LocalStore("cursor-abc")
    s.put(Project(id=10, name="Inbox", color=48))
    s.put(Project(id=11, name="Sub", parent_id=10))
    s.put(Label(id=20, name="urgent"))
    s.put(Task(id=1, content="Buy milk", project_id=10, labels=[20], priority=4,
               due=Due(date="2024-05-01", string="May 1")))
    s.put(Task(id=2, content="child", parent_id=1, project_id=10))
    s.put(Note(id=30, item_id=1, content="2 liters"))
    return s


class TestEncodeDecode:
    def test_document_shape(self, store):
        data = cache_file.encode(store)
        assert data["version"] == cache_file.CACHE_VERSION
        assert data["sync_cursor"] == "cursor-abc"
        assert set(data) == {"version", "sync_cursor", "tasks", "projects", "labels", "notes"}
        assert [t["id"] for t in data["tasks"]] == [1, 2]

    def test_decode_restores_store(self, store):
        assert cache_file.decode(json.loads(json.dumps(cache_file.encode(store)))) == store

    def test_null_cursor(self):
        decoded = cache_file.decode({"version": 1, "sync_cursor": None})
        assert decoded.sync_cursor is None
        assert decoded.is_empty

    @pytest.mark.parametrize(
        "document",
        [
            [],
            "text",
            {"version": 2, "sync_cursor": "c"},
            {"sync_cursor": 12},
            {"sync_cursor": "c", "tasks": {"id": 1}},
            {"sync_cursor": "c", "tasks": [{"content": "missing id"}]},
            {"sync_cursor": "c", "projects": [{"id": "not-a-number"}]},
        ],
    )
    def test_decode_rejects_malformed(self, document):
        with pytest.raises(CacheCorruptedError):
            cache_file.decode(document)


class TestLoad:
    def test_missing_file(self, tmp_path):
        with pytest.raises(CacheNotFoundError):
            cache_file.load(tmp_path / "nope.json")

    def test_not_found_is_a_cache_error(self, tmp_path):
        with pytest.raises(CacheError):
            cache_file.load(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CacheCorruptedError):
            cache_file.load(path)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(CacheCorruptedError):
            cache_file.load(path)

    def test_truncated_file(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(store, path)
        raw = path.read_text(encoding="utf-8")
        path.write_text(raw[: len(raw) // 2], encoding="utf-8")
        with pytest.raises(CacheCorruptedError):
            cache_file.load(path)


class TestSave:
    def test_save_then_load(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(store, path)
        assert cache_file.load(path) == store

    def test_creates_parent_directory(self, tmp_path, store):
        path = tmp_path / "a" / "b" / "cache.json"
        cache_file.save(store, path)
        assert path.exists()

    def test_owner_only_permissions(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(store, path)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_overwrites_previous(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(LocalStore("old"), path)
        cache_file.save(store, path)
        assert cache_file.load(path).sync_cursor == "cursor-abc"

    def test_failed_rename_keeps_old_file(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(LocalStore("old"), path)

        with patch("todoist_cli.adapters.cache_file.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(CacheWriteError):
                cache_file.save(store, path)

        assert cache_file.load(path).sync_cursor == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]

    def test_failed_serialization_keeps_old_file(self, tmp_path, store):
        path = tmp_path / "cache.json"
        cache_file.save(LocalStore("old"), path)

        with patch("todoist_cli.adapters.cache_file.json.dump", side_effect=TypeError("boom")):
            with pytest.raises(CacheWriteError):
                cache_file.save(store, path)

        assert cache_file.load(path).sync_cursor == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]

    def test_unwritable_directory(self, tmp_path, store):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        with pytest.raises(CacheWriteError):
            cache_file.save(store, blocker / "cache.json")
