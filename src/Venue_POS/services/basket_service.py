"""
Venue_POS.services.basket_service

The cashier's in-progress order (the "basket").

This is where cashier input is validated: the store itself accepts
anything, so bad quantities and unknown services are rejected here with a
BasketError whose message can go straight to the screen.
"""

from __future__ import annotations

from typing import List, Optional

from Venue_POS.domain.models import BasketItem, OrderRef, Service
from Venue_POS.services.pos_store import PosStore
from Venue_POS.utils.numbers import apply_discount

# Shorter input is treated as "still typing" and gets no discount lookup.
MIN_PHONE_LENGTH = 5


class BasketError(ValueError):
    """User-facing validation failure while building or checking out a basket."""


class Basket:
    """
    High-level basket operations.
    The UI should call this instead of building item dicts by hand.
    """

    def __init__(self) -> None:
        self.items: List[BasketItem] = []
        self.phone: str = ""
        self.discount: int = 0

    # ---------- Lines ----------

    def add_item(self, service: Optional[Service], quantity: int = 1) -> BasketItem:
        """
        Add a service; if it is already in the basket, bump its quantity.
        """
        if service is None:
            raise BasketError("Select a service first.")
        try:
            qty = int(quantity)
        except (TypeError, ValueError):
            raise BasketError("Enter a valid quantity.") from None
        if qty < 1:
            raise BasketError("Enter a valid quantity.")

        for line in self.items:
            if line.service_id == service.id:
                line.quantity += qty
                return line

        line = BasketItem(
            service_id=service.id,
            service_name=service.name,
            service_price=service.price,
            quantity=qty,
        )
        self.items.append(line)
        return line

    def remove_item(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            raise BasketError("No such line in the basket.")
        del self.items[index]

    def clear(self) -> None:
        self.items = []
        self.phone = ""
        self.discount = 0

    # ---------- Client ----------

    def set_phone(self, store: PosStore, phone: Optional[str]) -> int:
        """
        Attach a client phone and pick up their discount. Returns the
        discount now in effect.
        """
        self.phone = (phone or "").strip()
        if len(self.phone) < MIN_PHONE_LENGTH:
            self.discount = 0
            return self.discount
        client = store.get_client_by_phone(self.phone)
        self.discount = client.discount if client else 0
        return self.discount

    # ---------- Totals ----------

    def is_empty(self) -> bool:
        return not self.items

    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    def subtotal(self) -> float:
        return sum(line.service_price * line.quantity for line in self.items)

    def total(self) -> float:
        return apply_discount(self.subtotal(), self.discount)

    # ---------- Checkout ----------

    def checkout(self, store: PosStore) -> OrderRef:
        if self.is_empty():
            raise BasketError("The basket is empty.")
        ref = store.create_order(list(self.items), self.phone, self.discount)
        self.clear()
        return ref
