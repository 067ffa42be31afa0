"""
Venue_POS.data.dataset

In-memory working copy of the whole POS dataset, plus conversion to/from
the persisted snapshot document:

{
  "services":    [{id, name, price, rules}],
  "orders":      [{uuid, shortId, datetime, total, phone, discount}]   # uuid mode
                 [{id, datetime, total, phone, discount}]              # sequential mode
  "order_items": [{uuid, order_uuid, service_id, service_name, service_price, quantity}]
                 [{id, order_id, ...}]
  "_seq":        {service, order?, item?},
  "_settings":   {key: value},
  "_clients":    {phone: {discount, notes}},
  "_sync_queue": [{type, data, ts}]
}

Both key spellings are accepted on load, so a snapshot written in one mode
can still be read after switching modes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from Venue_POS.domain.models import Client, Order, OrderItem, Service
from Venue_POS.domain.sync_changes import SyncQueueEntry
from Venue_POS.utils.ids import ID_MODE_UUID
from Venue_POS.utils.numbers import clamp_percent, to_number

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    services: List[Service] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    order_items: List[OrderItem] = field(default_factory=list)
    seq: Dict[str, int] = field(default_factory=lambda: {"service": 0})
    settings: Dict[str, Any] = field(default_factory=dict)
    clients: Dict[str, Client] = field(default_factory=dict)
    sync_queue: List[SyncQueueEntry] = field(default_factory=list)

    # ---------- Snapshot out ----------

    def to_snapshot(self, id_mode: str = ID_MODE_UUID) -> Dict[str, Any]:
        return {
            "services": [service_to_dict(s) for s in self.services],
            "orders": [order_to_dict(o, id_mode) for o in self.orders],
            "order_items": [order_item_to_dict(i, id_mode) for i in self.order_items],
            "_seq": dict(self.seq),
            "_settings": dict(self.settings),
            "_clients": {
                phone: {"discount": c.discount, "notes": c.notes}
                for phone, c in self.clients.items()
            },
            "_sync_queue": [e.to_wire() for e in self.sync_queue],
        }

    # ---------- Snapshot in ----------

    @staticmethod
    def from_snapshot(raw: Dict[str, Any]) -> "Dataset":
        """
        Build a Dataset from a snapshot dict.

        Raises ValueError if the top-level shape is wrong. Individual bad
        rows are skipped with a warning so one broken record does not cost us
        the rest of the day's sales.
        """
        if not isinstance(raw, dict):
            raise ValueError("snapshot must be a JSON object")

        ds = Dataset()
        ds.services = _load_rows(raw.get("services"), service_from_dict, "service")
        ds.orders = _load_rows(raw.get("orders"), order_from_dict, "order")
        ds.order_items = _load_rows(raw.get("order_items"), order_item_from_dict, "order item")
        ds.sync_queue = _load_rows(raw.get("_sync_queue"), SyncQueueEntry.from_wire, "sync entry")

        seq = raw.get("_seq") or {}
        if isinstance(seq, dict):
            ds.seq = {str(k): int(to_number(v)) for k, v in seq.items()}
        ds.seq.setdefault("service", 0)

        settings = raw.get("_settings") or {}
        if isinstance(settings, dict):
            ds.settings = {str(k): v for k, v in settings.items() if v is not None}

        clients = raw.get("_clients") or {}
        if isinstance(clients, dict):
            for phone, data in clients.items():
                ds.clients[str(phone)] = client_from_dict(data)

        return ds


def empty_dataset() -> Dataset:
    return Dataset()


def _load_rows(rows: Any, loader, label: str) -> list:
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ValueError(f"{label} list has the wrong type")
    out = []
    for row in rows:
        try:
            out.append(loader(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed %s in snapshot: %s (%r)", label, exc, row)
    return out


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def service_to_dict(s: Service) -> Dict[str, Any]:
    return {"id": s.id, "name": s.name, "price": s.price, "rules": s.rules}


def service_from_dict(d: Dict[str, Any]) -> Service:
    return Service(
        id=int(d["id"]),
        name=str(d.get("name") or ""),
        price=to_number(d.get("price")),
        rules=d.get("rules") or None,
    )


def order_to_dict(o: Order, id_mode: str = ID_MODE_UUID) -> Dict[str, Any]:
    if id_mode == ID_MODE_UUID:
        head = {"uuid": o.id, "shortId": o.short_id}
    else:
        head = {"id": o.id}
    head.update(
        {
            "datetime": o.datetime,
            "total": o.total,
            "phone": o.phone,
            "discount": o.discount,
        }
    )
    return head


def order_from_dict(d: Dict[str, Any]) -> Order:
    order_id = d.get("uuid") if d.get("uuid") is not None else d["id"]
    return Order(
        id=order_id,
        datetime=int(d["datetime"]),
        total=to_number(d.get("total")),
        phone=str(d.get("phone") or ""),
        discount=clamp_percent(d.get("discount")),
        short_id=d.get("shortId"),
    )


def order_item_to_dict(i: OrderItem, id_mode: str = ID_MODE_UUID) -> Dict[str, Any]:
    if id_mode == ID_MODE_UUID:
        head = {"uuid": i.id, "order_uuid": i.order_id}
    else:
        head = {"id": i.id, "order_id": i.order_id}
    head.update(
        {
            "service_id": i.service_id,
            "service_name": i.service_name,
            "service_price": i.service_price,
            "quantity": i.quantity,
        }
    )
    return head


def order_item_from_dict(d: Dict[str, Any]) -> OrderItem:
    item_id = d.get("uuid") if d.get("uuid") is not None else d["id"]
    order_id = d.get("order_uuid") if d.get("order_uuid") is not None else d["order_id"]
    return OrderItem(
        id=item_id,
        order_id=order_id,
        service_id=d.get("service_id"),
        service_name=str(d.get("service_name") or ""),
        service_price=to_number(d.get("service_price")),
        quantity=int(to_number(d.get("quantity"))),
    )


def client_from_dict(d: Optional[Dict[str, Any]]) -> Client:
    d = d if isinstance(d, dict) else {}
    return Client(discount=clamp_percent(d.get("discount")), notes=str(d.get("notes") or ""))
