"""Snapshot backends and store restarts."""

import json
import random

import pytest

from Venue_POS.data.connection import get_connection
from Venue_POS.data.dataset import Dataset
from Venue_POS.data.schema import initialize_database
from Venue_POS.data.snapshot_store import (
    JsonFileSnapshotBackend,
    MemorySnapshotBackend,
    SqliteSnapshotBackend,
)
from Venue_POS.services.pos_store import PosStore
from Venue_POS.utils.ids import SequentialIdStrategy, UuidIdStrategy


@pytest.fixture(params=["memory", "json", "sqlite"])
def any_backend(request, tmp_path):
    if request.param == "memory":
        yield MemorySnapshotBackend()
    elif request.param == "json":
        yield JsonFileSnapshotBackend(tmp_path / "pos.json")
    else:
        backend = SqliteSnapshotBackend(tmp_path)
        yield backend
        backend.close()


def _populate(store):
    sid = store.add_service("Баня", 1500, "max 6")
    ref = store.create_order(
        [{"service_id": sid, "service_name": "Баня", "service_price": 1500, "quantity": 2}],
        "5550001",
        10,
    )
    store.set_setting("global_rules", "No fires")
    store.set_client_discount("5550001", 10, "regular")
    return ref


class TestBackends:
    def test_empty_backend_loads_none(self, any_backend):
        assert any_backend.load() is None

    def test_restart_restores_everything(self, any_backend, clock):
        first = PosStore(any_backend, id_strategy=UuidIdStrategy(random.Random(1)), clock=clock)
        ref = _populate(first)

        second = PosStore(any_backend, clock=clock)

        assert second.snapshot() == first.snapshot()
        assert second.get_order(ref.id).total == 2700.0
        assert second.get_order(ref.id).short_id == ref.display_id
        assert second.get_setting("global_rules") == "No fires"
        assert second.get_client_by_phone("5550001").notes == "regular"
        assert second.pending_sync_count() == 4

    def test_service_seq_survives_restart(self, any_backend, clock):
        first = PosStore(any_backend, clock=clock)
        first.add_service("A", 1)
        first.add_service("B", 1)
        first.delete_service(2)

        second = PosStore(any_backend, clock=clock)
        assert second.add_service("C", 1) == 3

    def test_sequential_mode_restart(self, any_backend, clock):
        first = PosStore(any_backend, id_strategy=SequentialIdStrategy(), clock=clock)
        _populate(first)
        raw = any_backend.load()
        assert raw["orders"][0]["id"] == 1
        assert raw["order_items"][0]["order_id"] == 1
        assert "uuid" not in raw["orders"][0]

        second = PosStore(any_backend, id_strategy=SequentialIdStrategy(), clock=clock)
        assert second.create_order([], "", 0).id == 2


class TestCorruption:
    def test_corrupt_json_file_starts_empty(self, tmp_path, clock):
        path = tmp_path / "pos.json"
        path.write_text("{not json", encoding="utf-8")

        store = PosStore(JsonFileSnapshotBackend(path), clock=clock)
        assert store.get_all_services() == []
        assert store.get_all_orders() == []

    def test_non_object_json_starts_empty(self, tmp_path, clock):
        path = tmp_path / "pos.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert JsonFileSnapshotBackend(path).load() is None

    def test_corrupt_sqlite_value_starts_empty(self, tmp_path, clock):
        backend = SqliteSnapshotBackend(tmp_path)
        with backend._conn:
            backend._conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?)", (backend.key, "garbage")
            )
        store = PosStore(backend, clock=clock)
        assert store.snapshot()["services"] == []
        backend.close()

    def test_wrong_shape_collection_starts_empty(self, clock):
        backend = MemorySnapshotBackend({"services": "oops", "orders": []})
        store = PosStore(backend, clock=clock)
        assert store.get_all_services() == []

    def test_malformed_rows_are_skipped(self, clock):
        backend = MemorySnapshotBackend(
            {
                "services": [{"id": 1, "name": "Sauna", "price": 100}, {"name": "no id"}],
                "orders": [{"uuid": "u-1", "datetime": 5, "total": 10}, {"uuid": "u-2"}],
                "_sync_queue": [{"type": "setting_set", "data": {"key": "a", "value": "1"}, "ts": 1},
                                {"type": "bogus", "data": {}, "ts": 2}],
            }
        )
        store = PosStore(backend, clock=clock)
        assert [s.name for s in store.get_all_services()] == ["Sauna"]
        assert [o.id for o in store.get_all_orders()] == ["u-1"]
        assert store.pending_sync_count() == 1


class TestSnapshotFormat:
    def test_json_file_is_readable_utf8(self, tmp_path, clock):
        path = tmp_path / "pos.json"
        _populate(PosStore(JsonFileSnapshotBackend(path), clock=clock))

        doc = json.loads(path.read_text(encoding="utf-8"))
        assert set(doc) == {
            "services", "orders", "order_items", "_seq", "_settings", "_clients", "_sync_queue",
        }
        assert doc["services"][0]["name"] == "Баня"
        assert doc["_sync_queue"][0]["type"] == "service_add"
        assert not list(tmp_path.glob("*.tmp"))

    def test_legacy_sequential_keys_load_in_uuid_mode(self):
        ds = Dataset.from_snapshot(
            {
                "orders": [{"id": 7, "datetime": 1, "total": 50, "phone": None, "discount": "x"}],
                "order_items": [{"id": 3, "order_id": 7, "service_id": 1,
                                 "service_name": "Boat", "service_price": 50, "quantity": 1}],
                "_seq": {"service": "4", "order": 7},
            }
        )
        assert ds.orders[0].id == 7
        assert (ds.orders[0].phone, ds.orders[0].discount) == ("", 0)
        assert ds.order_items[0].order_id == 7
        assert ds.seq == {"service": 4, "order": 7}

    def test_non_dict_snapshot_rejected(self):
        with pytest.raises(ValueError):
            Dataset.from_snapshot(["nope"])

    def test_store_reload_reads_backend(self, clock):
        backend = MemorySnapshotBackend()
        store = PosStore(backend, clock=clock)
        other = PosStore(backend, clock=clock)
        other.add_service("Boat", 400)

        assert store.get_all_services() == []
        store.reload()
        assert [s.name for s in store.get_all_services()] == ["Boat"]
        store.add_service("Sauna", 100)
        assert store.pending_sync_count() == 2

    def test_initialize_database_creates_kv_table(self, tmp_path):
        initialize_database(tmp_path)
        initialize_database(tmp_path)

        conn = get_connection(tmp_path)
        try:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'kv_store'"
            ).fetchall()
        finally:
            conn.close()
        assert len(rows) == 1
