"""
Tests for the JSON file persistence adapter.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the mockapi package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mockapi.repositories.json_storage import (  # noqa: E402
    CorruptDataError,
    JsonStorage,
    PersistenceError,
    StorageError,
    read_schema_file,
)


def test_save_then_load_keeps_structure_and_order(tmp_path):
    storage = JsonStorage(tmp_path / "nested" / "store.json")
    assert not storage.exists()
    data = {
        "orders": {"schema": {"fields": ["customers.id", "orderdate"], "belongsTo": ["customers"]}, "resources": {}},
        "customers": {"schema": {"fields": ["firstname"], "has": ["orders"]}, "resources": {"a1": {"firstname": "Zoë"}}},
    }
    storage.save(data)

    assert storage.exists()
    loaded = storage.load()
    assert loaded == data
    assert list(loaded) == ["orders", "customers"]
    assert "Zoë" in storage.path.read_text(encoding="utf-8")


def test_load_rejects_invalid_json(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CorruptDataError):
        JsonStorage(path).load()


def test_load_rejects_non_object_top_level(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(CorruptDataError):
        JsonStorage(path).load()


def test_corrupt_and_persistence_errors_share_a_base():
    assert issubclass(CorruptDataError, StorageError)
    assert issubclass(PersistenceError, StorageError)


def test_save_into_directory_raises_persistence_error(tmp_path):
    target = tmp_path / "occupied"
    target.mkdir()
    with pytest.raises(PersistenceError):
        JsonStorage(target).save({"customers": {}})


def test_save_rejects_unserializable_values(tmp_path):
    storage = JsonStorage(tmp_path / "store.json")
    with pytest.raises(PersistenceError):
        storage.save({"customers": object()})
    assert not storage.exists()


def test_read_schema_file(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text('{"customers": {"fields": ["email"]}}', encoding="utf-8")
    assert read_schema_file(path) == {"customers": {"fields": ["email"]}}
