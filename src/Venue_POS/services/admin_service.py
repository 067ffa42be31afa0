"""
Venue_POS.services.admin_service

Admin-screen edits: catalog entries, order corrections and client records.

Like the basket, this is where admin input is validated before it reaches
the store. Failures raise AdminError with a message meant for the screen.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional

from Venue_POS.domain.models import BasketItem, OrderId
from Venue_POS.services.pos_store import PosStore


class AdminError(ValueError):
    """User-facing validation failure on an admin screen."""


def _parse_price(raw: Any) -> float:
    try:
        price = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise AdminError("Enter a valid price.") from None
    if math.isnan(price) or math.isinf(price) or price < 0:
        raise AdminError("Enter a valid price.")
    return price


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


# ---------- Catalog ----------

def save_service(
    store: PosStore,
    name: Optional[str],
    price: Any,
    rules: Optional[str] = "",
    service_id: Optional[int] = None,
) -> int:
    """
    Add a new service, or update service_id when given. Returns the id.
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise AdminError("Enter a service name.")
    value = _parse_price(price)
    rules_text = (rules or "").strip() or None

    if service_id is None:
        return store.add_service(cleaned, value, rules_text)

    if store.get_service(service_id) is None:
        raise AdminError("This service no longer exists.")
    store.update_service(service_id, cleaned, value, rules_text)
    return service_id


# ---------- Orders ----------

def save_order_edit(store: PosStore, order_id: OrderId, items: Iterable[Any]) -> bool:
    """
    Replace the lines of an existing order.

    items may be OrderItem / BasketItem objects or dicts. An empty list
    deletes the order. Returns False when the order was deleted.
    """
    if store.get_order(order_id) is None:
        raise AdminError("This order no longer exists.")

    lines: List[BasketItem] = []
    for item in items:
        try:
            qty = int(_field(item, "quantity"))
        except (TypeError, ValueError, OverflowError):
            raise AdminError("Enter a valid quantity.") from None
        if qty < 1:
            raise AdminError("Enter a valid quantity.")
        lines.append(
            BasketItem(
                service_id=_field(item, "service_id"),
                service_name=str(_field(item, "service_name") or ""),
                service_price=float(_field(item, "service_price") or 0),
                quantity=qty,
            )
        )

    if not lines:
        store.delete_order(order_id)
        return False
    store.update_order(order_id, lines)
    return True


# ---------- Clients ----------

def save_client(
    store: PosStore,
    phone: Optional[str],
    discount: Any = 0,
    notes: Optional[str] = "",
    original_phone: Optional[str] = None,
) -> str:
    """
    Create or edit a client record. Changing the phone moves the record:
    the old phone is deleted, then the new one is written.
    """
    new_phone = (phone or "").strip()
    if not new_phone:
        raise AdminError("Enter a phone number.")

    try:
        pct = int(float(discount))
    except (TypeError, ValueError, OverflowError):
        pct = 0

    old_phone = (original_phone or "").strip()
    if old_phone and old_phone != new_phone:
        store.delete_client(old_phone)

    store.set_client_discount(new_phone, pct, (notes or "").strip())
    return new_phone
