"""Order lifecycle and stats on the POS store."""

import pytest

from Venue_POS.domain.models import BasketItem
from Venue_POS.domain.sync_changes import OrderCreated, OrderDeleted, OrderUpdated

HOUR_MS = 60 * 60 * 1000


def _item(name, price, qty, service_id=None):
    return {"service_id": service_id, "service_name": name, "service_price": price, "quantity": qty}


class TestCreateOrder:
    def test_example_scenario(self, store, sauna_items):
        ref = store.create_order(sauna_items, "5550001", 10)
        order = store.get_order(ref.id)

        assert order.total == 180.00
        assert order.discount == 10
        assert order.phone == "5550001"
        assert store.get_client_by_phone("5550001") is None

        store.set_client_discount("5550001", 10, "regular")
        client = store.get_client_by_phone("5550001")
        assert (client.discount, client.notes) == (10, "regular")

    @pytest.mark.parametrize(
        "items, discount, expected_total, expected_discount",
        [
            ([_item("A", 19.99, 3), _item("B", 5.5, 2)], 15, 60.32, 15),
            ([_item("A", 100, 1)], 150, 0.0, 100),
            ([_item("A", 100, 1)], -5, 100.0, 0),
            ([_item("A", 33.33, 3)], "abc", 99.99, 0),
            ([_item("A", 10, 1), _item("B", 2.5, 2)], 50, 7.5, 50),
        ],
    )
    def test_total_and_discount_clamp(self, store, items, discount, expected_total, expected_discount):
        ref = store.create_order(items, "", discount)
        order = store.get_order(ref.id)
        assert order.total == expected_total
        assert order.discount == expected_discount

    def test_uuid_mode_returns_short_display_id(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 0)
        assert len(ref.id) == 36
        assert ref.display_id == ref.id.split("-")[1]
        assert store.get_order(ref.id).short_id == ref.display_id

    def test_sequential_mode_ids(self, seq_store, sauna_items):
        first = seq_store.create_order(sauna_items, "", 0)
        second = seq_store.create_order(sauna_items, "", 0)
        assert (first.id, second.id) == (1, 2)
        assert second.display_id == "2"
        assert [i.id for i in seq_store.get_order_items(2)] == [2]

    def test_phone_is_trimmed(self, store, sauna_items):
        ref = store.create_order(sauna_items, "  5550009 ", 0)
        assert store.get_order(ref.id).phone == "5550009"

    def test_items_are_denormalized_copies(self, store):
        sid = store.add_service("Boat", 400, None)
        ref = store.create_order([BasketItem(sid, "Boat", 400.0, 1)], "", 0)

        store.update_service(sid, "Boat (new)", 999, None)

        items = store.get_order_items(ref.id)
        assert (items[0].service_name, items[0].service_price) == ("Boat", 400.0)
        assert items[0].service_id == sid

    def test_queues_full_payload(self, store, sauna_items):
        ref = store.create_order(sauna_items, "5550001", 10)
        entry = store.queue.entries()[-1]
        assert isinstance(entry.change, OrderCreated)
        assert entry.change.order["uuid"] == ref.id
        assert entry.change.order["shortId"] == ref.display_id
        assert entry.change.items[0]["order_uuid"] == ref.id
        assert entry.change.items[0]["service_name"] == "Sauna"


class TestUpdateOrder:
    def test_replaces_items_and_keeps_discount(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 20)
        store.update_order(ref.id, [_item("Boat", 50, 3), _item("Grill", 10, 1)])

        order = store.get_order(ref.id)
        assert order.discount == 20
        assert order.total == 128.0
        assert sorted(i.service_name for i in store.get_order_items(ref.id)) == ["Boat", "Grill"]

    def test_is_idempotent(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 10)
        new_items = [_item("Boat", 50, 3)]

        store.update_order(ref.id, new_items)
        first_total = store.get_order(ref.id).total
        store.update_order(ref.id, new_items)

        items = store.get_order_items(ref.id)
        assert store.get_order(ref.id).total == first_total == 135.0
        assert len(items) == 1
        assert (items[0].service_name, items[0].quantity) == ("Boat", 3)

    def test_unknown_order_is_noop(self, store, sauna_items):
        store.create_order(sauna_items, "", 0)
        before = store.snapshot()
        store.update_order("missing", [_item("X", 1, 1)])
        assert store.snapshot() == before

    def test_queues_update_record(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 0)
        store.update_order(ref.id, [_item("Boat", 50, 1)])
        change = store.queue.entries()[-1].change
        assert isinstance(change, OrderUpdated)
        assert change.order_id == ref.id
        assert change.order["total"] == 50.0


class TestDeleteOrder:
    def test_removes_only_its_items(self, store, sauna_items):
        keep = store.create_order([_item("Boat", 50, 1), _item("Grill", 10, 2)], "", 0)
        drop = store.create_order(sauna_items, "", 0)

        store.delete_order(drop.id)

        assert store.get_order(drop.id) is None
        assert store.get_order_items(drop.id) == []
        assert len(store.get_order_items(keep.id)) == 2
        change = store.queue.entries()[-1].change
        assert isinstance(change, OrderDeleted)
        assert (change.order_key, change.order_id) == ("uuid", drop.id)

    def test_sequential_delete_uses_id_key(self, seq_store, sauna_items):
        ref = seq_store.create_order(sauna_items, "", 0)
        seq_store.delete_order(ref.id)
        change = seq_store.queue.entries()[-1].change
        assert (change.order_key, change.order_id) == ("id", 1)


class TestQueriesAndStats:
    def _three_orders(self, store, clock):
        a = store.create_order([_item("Sauna", 100, 1), _item("Boat", 40, 2)], "", 0)
        clock.advance(HOUR_MS)
        b = store.create_order([_item("Boat", 40, 1)], "", 50)
        clock.advance(HOUR_MS)
        c = store.create_order([_item("Sauna", 100, 3)], "", 0)
        return a, b, c

    def test_get_orders_inclusive_newest_first(self, store, clock):
        start = clock.now
        a, b, c = self._three_orders(store, clock)

        orders = store.get_orders(start, start + HOUR_MS)
        assert [o.id for o in orders] == [b.id, a.id]

        everything = store.get_orders(start, clock.now)
        assert [o.id for o in everything] == [c.id, b.id, a.id]

    def test_stats_by_period(self, store, clock):
        start = clock.now
        self._three_orders(store, clock)

        stats = store.get_stats_by_period(start, start + HOUR_MS)
        # gross item revenue: 100 + 80 + 40
        assert stats.revenue == pytest.approx(220.0)
        assert stats.order_count == 2
        assert stats.item_count == 4
        assert [(r.service_name, r.total_qty) for r in stats.by_service] == [("Boat", 3), ("Sauna", 1)]
        assert stats.by_service[0].total_revenue == pytest.approx(120.0)
        assert len(stats.orders) == 2

    def test_stats_sorted_by_revenue_desc(self, store, clock):
        start = clock.now
        self._three_orders(store, clock)
        stats = store.get_stats_by_period(start, clock.now)
        revenues = [r.total_revenue for r in stats.by_service]
        assert revenues == sorted(revenues, reverse=True)
        assert stats.by_service[0].service_name == "Sauna"

    def test_empty_period(self, store, clock):
        self._three_orders(store, clock)
        stats = store.get_stats_by_period(0, 1)
        assert (stats.revenue, stats.order_count, stats.item_count) == (0.0, 0, 0)
        assert stats.by_service == [] and stats.orders == []

    def test_order_summary(self, store):
        ref = store.create_order([_item("Sauna", 100, 2), _item("Boat", 40, 1)], "", 0)
        assert store.get_order_summary(ref.id) == "Sauna ×2, Boat ×1"
