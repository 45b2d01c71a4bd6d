from __future__ import annotations

from production_tracker.storage.backend import InMemoryBackend, JsonFileBackend


def test_in_memory_backend_basic_operations():
    backend = InMemoryBackend({"a": "1"})
    backend.set_item("b", "2")
    backend.remove_item("a")
    backend.remove_item("never-there")

    assert backend.get_item("a") is None
    assert backend.get_item("b") == "2"
    assert backend.keys() == ["b"]


def test_json_file_backend_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileBackend(path).set_item("halagel_users", "[]")

    other = JsonFileBackend(path)
    assert other.get_item("halagel_users") == "[]"

    other.remove_item("halagel_users")
    assert JsonFileBackend(path).get_item("halagel_users") is None


def test_json_file_backend_sees_writes_from_other_instances(tmp_path):
    path = tmp_path / "store.json"
    first, second = JsonFileBackend(path), JsonFileBackend(path)

    first.set_item("k", "one")
    second.set_item("k", "two")

    assert first.get_item("k") == "two"


def test_json_file_backend_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    backend = JsonFileBackend(path)

    assert backend.get_item("anything") is None
    assert backend.keys() == []

    backend.set_item("k", "v")
    assert backend.get_item("k") == "v"


def test_json_file_backend_ignores_non_object_documents(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileBackend(path).keys() == []
