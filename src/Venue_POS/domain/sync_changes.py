"""
Venue_POS.domain.sync_changes

Change records queued for the remote server.

Each mutation kind is its own frozen dataclass carrying exactly what the
server needs to replay it. `change_to_wire` / `change_from_wire` convert to
and from the {"type", "data"} shape the sync endpoint speaks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

OrderId = Union[int, str]

SERVICE_ADD = "service_add"
SERVICE_UPDATE = "service_update"
SERVICE_DELETE = "service_delete"
ORDER_CREATE = "order_create"
ORDER_UPDATE = "order_update"
ORDER_DELETE = "order_delete"
SETTING_SET = "setting_set"
CLIENT_SET = "client_set"
CLIENT_DELETE = "client_delete"


# ---------- Variants ----------

@dataclass(frozen=True)
class ServiceAdded:
    service: Dict[str, Any]


@dataclass(frozen=True)
class ServiceUpdated:
    service: Dict[str, Any]


@dataclass(frozen=True)
class ServiceDeleted:
    service_id: int


@dataclass(frozen=True)
class OrderCreated:
    order: Dict[str, Any]
    items: List[Dict[str, Any]]


@dataclass(frozen=True)
class OrderUpdated:
    order_key: str            # "uuid" or "id", depending on id mode
    order_id: OrderId
    order: Dict[str, Any]
    items: List[Dict[str, Any]]


@dataclass(frozen=True)
class OrderDeleted:
    order_key: str
    order_id: OrderId


@dataclass(frozen=True)
class SettingSet:
    key: str
    value: Optional[str]


@dataclass(frozen=True)
class ClientSet:
    phone: str
    discount: int
    notes: str


@dataclass(frozen=True)
class ClientDeleted:
    phone: str


SyncChange = Union[
    ServiceAdded,
    ServiceUpdated,
    ServiceDeleted,
    OrderCreated,
    OrderUpdated,
    OrderDeleted,
    SettingSet,
    ClientSet,
    ClientDeleted,
]


@dataclass(frozen=True)
class SyncQueueEntry:
    change: SyncChange
    ts: int  # device-local epoch ms, unique within the queue

    def to_wire(self) -> Dict[str, Any]:
        wire = change_to_wire(self.change)
        wire["ts"] = self.ts
        return wire

    @staticmethod
    def from_wire(raw: Dict[str, Any]) -> "SyncQueueEntry":
        return SyncQueueEntry(
            change=change_from_wire(raw.get("type"), raw.get("data") or {}),
            ts=int(raw["ts"]),
        )


# ---------- Wire conversion ----------

def change_type(change: SyncChange) -> str:
    return change_to_wire(change)["type"]


def change_to_wire(change: SyncChange) -> Dict[str, Any]:
    if isinstance(change, ServiceAdded):
        return {"type": SERVICE_ADD, "data": dict(change.service)}
    if isinstance(change, ServiceUpdated):
        return {"type": SERVICE_UPDATE, "data": dict(change.service)}
    if isinstance(change, ServiceDeleted):
        return {"type": SERVICE_DELETE, "data": {"id": change.service_id}}
    if isinstance(change, OrderCreated):
        return {
            "type": ORDER_CREATE,
            "data": {"order": dict(change.order), "items": [dict(i) for i in change.items]},
        }
    if isinstance(change, OrderUpdated):
        return {
            "type": ORDER_UPDATE,
            "data": {
                change.order_key: change.order_id,
                "order": dict(change.order),
                "items": [dict(i) for i in change.items],
            },
        }
    if isinstance(change, OrderDeleted):
        return {"type": ORDER_DELETE, "data": {change.order_key: change.order_id}}
    if isinstance(change, SettingSet):
        return {"type": SETTING_SET, "data": {"key": change.key, "value": change.value}}
    if isinstance(change, ClientSet):
        return {
            "type": CLIENT_SET,
            "data": {
                "phone": change.phone,
                "data": {"discount": change.discount, "notes": change.notes},
            },
        }
    if isinstance(change, ClientDeleted):
        return {"type": CLIENT_DELETE, "data": {"phone": change.phone}}
    raise TypeError(f"Unsupported sync change: {change!r}")


def _order_key(data: Dict[str, Any]) -> str:
    return "uuid" if "uuid" in data else "id"


def change_from_wire(kind: Optional[str], data: Dict[str, Any]) -> SyncChange:
    if kind == SERVICE_ADD:
        return ServiceAdded(service=dict(data))
    if kind == SERVICE_UPDATE:
        return ServiceUpdated(service=dict(data))
    if kind == SERVICE_DELETE:
        return ServiceDeleted(service_id=data.get("id"))
    if kind == ORDER_CREATE:
        return OrderCreated(order=dict(data.get("order") or {}), items=list(data.get("items") or []))
    if kind == ORDER_UPDATE:
        key = _order_key(data)
        return OrderUpdated(
            order_key=key,
            order_id=data.get(key),
            order=dict(data.get("order") or {}),
            items=list(data.get("items") or []),
        )
    if kind == ORDER_DELETE:
        key = _order_key(data)
        return OrderDeleted(order_key=key, order_id=data.get(key))
    if kind == SETTING_SET:
        return SettingSet(key=str(data.get("key")), value=data.get("value"))
    if kind == CLIENT_SET:
        inner = data.get("data") or {}
        return ClientSet(
            phone=str(data.get("phone") or ""),
            discount=int(inner.get("discount") or 0),
            notes=str(inner.get("notes") or ""),
        )
    if kind == CLIENT_DELETE:
        return ClientDeleted(phone=str(data.get("phone") or ""))
    raise ValueError(f"Unknown sync change type: {kind!r}")
