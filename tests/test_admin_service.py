import pytest

from Venue_POS.domain.sync_changes import ClientDeleted, ClientSet
from Venue_POS.services.admin_service import (
    AdminError,
    save_client,
    save_order_edit,
    save_service,
)


class TestSaveService:
    def test_add_and_update(self, store):
        sid = save_service(store, "  Sauna ", "1500", " max 6 ")
        svc = store.get_service(sid)
        assert (svc.name, svc.price, svc.rules) == ("Sauna", 1500.0, "max 6")

        assert save_service(store, "Sauna 2h", 2500, "", service_id=sid) == sid
        svc = store.get_service(sid)
        assert (svc.name, svc.price, svc.rules) == ("Sauna 2h", 2500.0, None)

    def test_zero_price_is_allowed(self, store):
        sid = save_service(store, "Entry for kids", 0)
        assert store.get_service(sid).price == 0.0

    @pytest.mark.parametrize(
        "name, price",
        [("", 100), ("   ", 100), (None, 100), ("Boat", -5), ("Boat", "abc"),
         ("Boat", float("nan")), ("Boat", None), ("Boat", float("inf"))],
    )
    def test_rejects_bad_input_before_store(self, store, name, price):
        with pytest.raises(AdminError):
            save_service(store, name, price)
        assert store.get_all_services() == []
        assert store.pending_sync_count() == 0

    def test_update_missing_service(self, store):
        with pytest.raises(AdminError):
            save_service(store, "Ghost", 1, service_id=42)


class TestSaveOrderEdit:
    def test_replaces_items_from_order_items(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 10)
        items = store.get_order_items(ref.id)
        items[0].quantity = 3

        assert save_order_edit(store, ref.id, items) is True

        order = store.get_order(ref.id)
        assert order.total == 270.0
        assert [i.quantity for i in store.get_order_items(ref.id)] == [3]

    def test_empty_list_deletes_order(self, store, sauna_items):
        ref = store.create_order(sauna_items, "", 0)

        assert save_order_edit(store, ref.id, []) is False

        assert store.get_order(ref.id) is None
        assert store.get_order_items(ref.id) == []

    @pytest.mark.parametrize("qty", [0, -2, "x", None])
    def test_rejects_bad_quantity(self, store, sauna_items, qty):
        ref = store.create_order(sauna_items, "", 0)
        edited = [dict(sauna_items[0], quantity=qty)]

        with pytest.raises(AdminError):
            save_order_edit(store, ref.id, edited)

        assert store.get_order(ref.id).total == 200.0
        assert [i.quantity for i in store.get_order_items(ref.id)] == [2]

    def test_missing_order(self, store, sauna_items):
        with pytest.raises(AdminError):
            save_order_edit(store, "nope", sauna_items)


class TestSaveClient:
    def test_requires_phone(self, store):
        with pytest.raises(AdminError):
            save_client(store, "  ", 10, "")
        assert store.pending_sync_count() == 0

    def test_create(self, store):
        assert save_client(store, " 5550001 ", "15", " regular ") == "5550001"
        client = store.get_client_by_phone("5550001")
        assert (client.discount, client.notes) == (15, "regular")

    def test_bad_discount_becomes_zero(self, store):
        save_client(store, "5550001", "lots", "")
        assert store.get_client_by_phone("5550001").discount == 0

    def test_rename_moves_record(self, store):
        save_client(store, "5550001", 10, "regular")
        save_client(store, "5550009", 10, "regular", original_phone="5550001")

        assert store.get_client_by_phone("5550001") is None
        assert store.get_client_by_phone("5550009").notes == "regular"
        changes = [e.change for e in store.queue.entries()]
        assert changes[-2:] == [ClientDeleted("5550001"), ClientSet("5550009", 10, "regular")]

    def test_same_phone_edit_does_not_delete(self, store):
        save_client(store, "5550001", 10, "")
        save_client(store, "5550001", 20, "", original_phone="5550001")
        assert not any(isinstance(e.change, ClientDeleted) for e in store.queue.entries())
        assert store.get_client_by_phone("5550001").discount == 20
