import pytest

from Venue_POS.domain.models import Service
from Venue_POS.services.basket_service import Basket, BasketError

SAUNA = Service(id=1, name="Sauna", price=100.0)
BOAT = Service(id=2, name="Boat", price=40.0)


class TestBasketLines:
    def test_add_merges_same_service(self):
        basket = Basket()
        basket.add_item(SAUNA, 1)
        basket.add_item(BOAT)
        basket.add_item(SAUNA, 2)

        assert [(line.service_name, line.quantity) for line in basket.items] == [("Sauna", 3), ("Boat", 1)]
        assert basket.item_count() == 4
        assert basket.subtotal() == 340.0

    @pytest.mark.parametrize("qty", [0, -1, "two", None])
    def test_rejects_bad_quantity(self, qty):
        with pytest.raises(BasketError):
            Basket().add_item(SAUNA, qty)

    def test_rejects_missing_service(self):
        with pytest.raises(BasketError):
            Basket().add_item(None)

    def test_remove_item(self):
        basket = Basket()
        basket.add_item(SAUNA)
        basket.add_item(BOAT)
        basket.remove_item(0)
        assert [line.service_name for line in basket.items] == ["Boat"]
        with pytest.raises(BasketError):
            basket.remove_item(5)


class TestBasketCheckout:
    def test_phone_picks_up_client_discount(self, store):
        store.set_client_discount("5550001", 10, "regular")
        basket = Basket()
        basket.add_item(SAUNA, 2)

        assert basket.set_phone(store, " 5550001 ") == 10
        assert basket.total() == 180.0

    def test_short_or_unknown_phone_means_no_discount(self, store):
        store.set_client_discount("555", 50, "")
        basket = Basket()
        assert basket.set_phone(store, "555") == 0
        assert basket.set_phone(store, "5559999") == 0

    def test_checkout_creates_order_and_clears(self, store):
        store.set_client_discount("5550001", 10, "")
        basket = Basket()
        basket.add_item(SAUNA, 2)
        basket.set_phone(store, "5550001")

        ref = basket.checkout(store)

        order = store.get_order(ref.id)
        assert (order.total, order.discount, order.phone) == (180.0, 10, "5550001")
        assert basket.is_empty() and basket.phone == "" and basket.discount == 0

    def test_checkout_empty_basket(self, store):
        with pytest.raises(BasketError):
            Basket().checkout(store)
        assert store.get_all_orders() == []
