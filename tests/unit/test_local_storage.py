"""Unit tests for key-value storage backends."""

from __future__ import annotations

import json

from webchat.local_storage import InMemoryStorage, JsonFileStorage


def test_in_memory_storage_operations():
    storage = InMemoryStorage({"a": "1"})
    storage.set_item("b", "2")
    storage.remove_item("a")
    storage.remove_item("missing")

    assert storage.get_item("a") is None
    assert storage.get_item("b") == "2"

    storage.clear()
    assert storage.get_item("b") is None


def test_json_file_storage_missing_file_is_empty(tmp_path):
    storage = JsonFileStorage(tmp_path / "absent.json")

    assert storage.get_item("conversations") is None


def test_json_file_storage_rewrites_whole_file(tmp_path):
    path = tmp_path / "store" / "local_storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("conversations", "[]")
    storage.set_item("theme", "dark")

    with open(path, encoding="utf-8") as handle:
        assert json.load(handle) == {"conversations": "[]", "theme": "dark"}

    storage.remove_item("theme")
    assert JsonFileStorage(path).get_item("theme") is None
    assert JsonFileStorage(path).get_item("conversations") == "[]"


def test_json_file_storage_corrupt_file_is_empty(tmp_path, caplog):
    path = tmp_path / "local_storage.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get_item("theme") is None
    assert "Failed to read local storage" in caplog.text

    storage.set_item("theme", "dark")
    assert storage.get_item("theme") == "dark"


def test_json_file_storage_ignores_non_string_values(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text(json.dumps({"theme": "dark", "count": 3}), encoding="utf-8")

    storage = JsonFileStorage(path)

    assert storage.get_item("theme") == "dark"
    assert storage.get_item("count") is None


def test_json_file_storage_clear(tmp_path):
    path = tmp_path / "local_storage.json"
    storage = JsonFileStorage(path)
    storage.set_item("theme", "dark")

    storage.clear()

    assert not path.exists()
