from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mockapi.repositories.json_storage import JsonStorage  # noqa: E402
from mockapi.services.datastore import DataStore  # noqa: E402

_spec = importlib.util.spec_from_file_location("seed_data", ROOT / "scripts" / "seed_data.py")
seed_data = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(seed_data)


def test_seed_creates_customers_with_their_orders(tmp_path):
    store = DataStore(JsonStorage(tmp_path / "seed.json"), seed_data.SCHEMA)
    assert seed_data.seed(store) == 19

    customers = store.list_resources("customers", related=["orders"])
    assert len(customers) == 8
    john = store.find_resources("customers", "email", "jdoe@email.com", related=["orders"])[0]
    assert [order["ordertotal"] for order in john["orders"]] == ["325.00", "1287.00"]
    assert sum(len(customer["orders"]) for customer in customers) == 19


def test_main_refuses_to_overwrite_without_force(tmp_path, monkeypatch):
    target = tmp_path / "seed.json"
    target.write_text("{}", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["seed_data.py", "--data-file", str(target)])
    with pytest.raises(SystemExit, match="--force"):
        seed_data.main()
    assert target.read_text(encoding="utf-8") == "{}"


def test_main_with_force_replaces_file(tmp_path, monkeypatch):
    target = tmp_path / "seed.json"
    target.write_text("garbage", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["seed_data.py", "--data-file", str(target), "--force"])
    seed_data.main()
    assert len(DataStore(JsonStorage(target)).list_resources("orders")) == 19


def test_main_follows_configured_foreign_key_suffix(tmp_path, monkeypatch):
    from mockapi.core import config as core_config

    target = tmp_path / "seed.json"
    monkeypatch.setenv("MOCKAPI_FK_SUFFIX", "_id")
    monkeypatch.setattr(sys, "argv", ["seed_data.py", "--data-file", str(target)])
    core_config.get_settings.cache_clear()
    try:
        seed_data.main()
    finally:
        core_config.get_settings.cache_clear()

    store = DataStore(JsonStorage(target), fk_suffix="_id")
    assert store.get_collection_schema("orders").fields[0] == "customers_id"
    customers = store.list_resources("customers", related=["orders"])
    assert sum(len(customer["orders"]) for customer in customers) == 19
