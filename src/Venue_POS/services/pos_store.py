"""
Venue_POS.services.pos_store

The POS domain store: in-memory working copy of the dataset plus all CRUD
operations the cashier and admin screens need.

Every mutation:
  1) applies to the in-memory dataset
  2) appends a change record to the sync queue (when sync is enabled)
  3) persists the whole snapshot through the injected backend

Operations never fail on bad input: NaN-ish numbers collapse to 0 and
missing ids are silent no-ops. Callers validate before calling (see
basket_service for the cashier-side checks).

One store instance is built at startup and passed to whoever needs it;
a re-entrant lock makes each read-mutate-persist step atomic with respect
to the sync worker thread.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from Venue_POS.data.dataset import (
    Dataset,
    client_from_dict,
    empty_dataset,
    order_item_to_dict,
    order_to_dict,
    service_from_dict,
    service_to_dict,
)
from Venue_POS.data.snapshot_store import SnapshotBackend
from Venue_POS.domain.models import (
    BasketItem,
    Client,
    ClientSummary,
    Order,
    OrderId,
    OrderItem,
    OrderRef,
    PeriodStats,
    Service,
)
from Venue_POS.domain.sync_changes import (
    ClientDeleted,
    ClientSet,
    OrderCreated,
    OrderDeleted,
    OrderUpdated,
    ServiceAdded,
    ServiceDeleted,
    ServiceUpdated,
    SettingSet,
    SyncChange,
    SyncQueueEntry,
)
from Venue_POS.integrations.sync_api_client import PullPayload
from Venue_POS.services.catalog_search_service import ServiceMatch, search_services
from Venue_POS.services.stats_service import (
    aggregate_period,
    build_client_summaries,
    orders_in_range,
)
from Venue_POS.services.sync_queue import SyncQueue
from Venue_POS.utils.ids import ID_MODE_UUID, IdStrategy, UuidIdStrategy
from Venue_POS.utils.numbers import apply_discount, clamp_percent, to_number

logger = logging.getLogger(__name__)

PULL_OVERWRITE = "overwrite"
PULL_KEEP_PENDING = "keep_pending"
PULL_POLICIES = (PULL_OVERWRITE, PULL_KEEP_PENDING)

ItemInput = Union[BasketItem, Dict[str, Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _coerce_item(raw: ItemInput) -> BasketItem:
    if isinstance(raw, BasketItem):
        src = {
            "service_id": raw.service_id,
            "service_name": raw.service_name,
            "service_price": raw.service_price,
            "quantity": raw.quantity,
        }
    else:
        src = raw
    return BasketItem(
        service_id=src.get("service_id"),
        service_name=str(src.get("service_name") or ""),
        service_price=to_number(src.get("service_price")),
        quantity=int(to_number(src.get("quantity"))),
    )


class PosStore:
    """
    Domain store over one dataset snapshot.

    backend      : where the snapshot lives (sqlite / json / memory)
    id_strategy  : uuid (multi-device) or sequential (single device) order ids
    clock        : epoch-ms source; injectable for tests
    sync_enabled : when False no change records are queued (local-only install)
    pull_policy  : how pulled reference data treats unsynced local edits
    """

    def __init__(
        self,
        backend: SnapshotBackend,
        id_strategy: Optional[IdStrategy] = None,
        clock: Optional[Callable[[], int]] = None,
        sync_enabled: bool = True,
        pull_policy: str = PULL_OVERWRITE,
    ) -> None:
        if pull_policy not in PULL_POLICIES:
            raise ValueError(f"Unknown pull policy: {pull_policy!r}")
        self.backend = backend
        self.ids = id_strategy or UuidIdStrategy()
        self._clock = clock or _now_ms
        self.sync_enabled = sync_enabled
        self.pull_policy = pull_policy
        self._lock = threading.RLock()

        self._data = self._load()
        self.queue = SyncQueue(self._data.sync_queue, self._clock)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> Dataset:
        raw = self.backend.load()
        if raw is None:
            return empty_dataset()
        try:
            return Dataset.from_snapshot(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Stored snapshot is corrupt, starting with an empty dataset: %s", exc)
            return empty_dataset()

    def _save(self) -> None:
        self.backend.save(self._data.to_snapshot(self.ids.mode))

    def _enqueue(self, change: SyncChange) -> None:
        if self.sync_enabled:
            self.queue.append(change)

    def reload(self) -> None:
        """Re-read the persisted snapshot, dropping in-memory state."""
        with self._lock:
            self._data = self._load()
            self.queue.rebind(self._data.sync_queue)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._data.to_snapshot(self.ids.mode)

    @property
    def _order_key(self) -> str:
        return "uuid" if self.ids.mode == ID_MODE_UUID else "id"

    # ------------------------------------------------------------------
    # Services (catalog)
    # ------------------------------------------------------------------

    def get_all_services(self) -> List[Service]:
        with self._lock:
            services = [copy.copy(s) for s in self._data.services]
        return sorted(services, key=lambda s: s.name.casefold())

    def get_service(self, service_id: int) -> Optional[Service]:
        with self._lock:
            for s in self._data.services:
                if s.id == service_id:
                    return copy.copy(s)
        return None

    def search_services(self, query: str, limit: int = 10) -> List[ServiceMatch]:
        return search_services(self.get_all_services(), query, limit=limit)

    def add_service(self, name: str, price: Any, rules: Optional[str] = None) -> int:
        with self._lock:
            self._data.seq["service"] = int(self._data.seq.get("service", 0)) + 1
            service = Service(
                id=self._data.seq["service"],
                name=name,
                price=to_number(price),
                rules=rules or None,
            )
            self._data.services.append(service)
            self._enqueue(ServiceAdded(service=service_to_dict(service)))
            self._save()
            return service.id

    def update_service(self, service_id: int, name: str, price: Any, rules: Optional[str] = None) -> None:
        with self._lock:
            for s in self._data.services:
                if s.id == service_id:
                    s.name = name
                    s.price = to_number(price)
                    s.rules = rules or None
                    self._enqueue(ServiceUpdated(service=service_to_dict(s)))
                    self._save()
                    return

    def delete_service(self, service_id: int) -> None:
        with self._lock:
            self._data.services = [s for s in self._data.services if s.id != service_id]
            self._enqueue(ServiceDeleted(service_id=service_id))
            self._save()

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def _build_items(self, order_id: OrderId, items: Iterable[BasketItem]) -> List[OrderItem]:
        return [
            OrderItem(
                id=self.ids.new_item_id(self._data.seq),
                order_id=order_id,
                service_id=item.service_id,
                service_name=item.service_name,
                service_price=item.service_price,
                quantity=item.quantity,
            )
            for item in items
        ]

    def create_order(self, items: Iterable[ItemInput], phone: Optional[str] = "", discount_pct: Any = 0) -> OrderRef:
        """
        Record a sale. Item name/price are copied so later catalog edits
        never change an old receipt.
        """
        basket = [_coerce_item(i) for i in items]
        subtotal = sum(i.service_price * i.quantity for i in basket)
        discount = clamp_percent(discount_pct)

        with self._lock:
            order_id, display = self.ids.new_order_id(self._data.seq)
            order = Order(
                id=order_id,
                datetime=int(self._clock()),
                total=apply_discount(subtotal, discount),
                phone=(phone or "").strip(),
                discount=discount,
                short_id=display if self.ids.mode == ID_MODE_UUID else None,
            )
            self._data.orders.append(order)
            order_items = self._build_items(order_id, basket)
            self._data.order_items.extend(order_items)

            self._enqueue(
                OrderCreated(
                    order=order_to_dict(order, self.ids.mode),
                    items=[order_item_to_dict(i, self.ids.mode) for i in order_items],
                )
            )
            self._save()

        logger.debug("Order %s created: total=%.2f items=%d", order.id, order.total, len(order_items))
        return OrderRef(id=order.id, display_id=order.display_id)

    def delete_order(self, order_id: OrderId) -> None:
        with self._lock:
            self._data.orders = [o for o in self._data.orders if o.id != order_id]
            self._data.order_items = [i for i in self._data.order_items if i.order_id != order_id]
            self._enqueue(OrderDeleted(order_key=self._order_key, order_id=order_id))
            self._save()

    def update_order(self, order_id: OrderId, items: Iterable[ItemInput]) -> None:
        """
        Replace all items of an existing order and recompute its total with
        the order's original discount.
        """
        basket = [_coerce_item(i) for i in items]
        with self._lock:
            order = next((o for o in self._data.orders if o.id == order_id), None)
            if order is None:
                return

            self._data.order_items = [i for i in self._data.order_items if i.order_id != order_id]
            subtotal = sum(i.service_price * i.quantity for i in basket)
            order.total = apply_discount(subtotal, order.discount or 0)

            order_items = self._build_items(order_id, basket)
            self._data.order_items.extend(order_items)

            self._enqueue(
                OrderUpdated(
                    order_key=self._order_key,
                    order_id=order_id,
                    order=order_to_dict(order, self.ids.mode),
                    items=[order_item_to_dict(i, self.ids.mode) for i in order_items],
                )
            )
            self._save()

    def get_all_orders(self) -> List[Order]:
        with self._lock:
            return [copy.copy(o) for o in self._data.orders]

    def get_order(self, order_id: OrderId) -> Optional[Order]:
        with self._lock:
            for o in self._data.orders:
                if o.id == order_id:
                    return copy.copy(o)
        return None

    def get_orders(self, from_ms: int, to_ms: int) -> List[Order]:
        with self._lock:
            return [copy.copy(o) for o in orders_in_range(self._data.orders, from_ms, to_ms)]

    def get_order_items(self, order_id: OrderId) -> List[OrderItem]:
        with self._lock:
            return [copy.copy(i) for i in self._data.order_items if i.order_id == order_id]

    def get_order_summary(self, order_id: OrderId) -> str:
        return ", ".join(f"{i.service_name} ×{i.quantity}" for i in self.get_order_items(order_id))

    def get_stats_by_period(self, from_ms: int, to_ms: int) -> PeriodStats:
        with self._lock:
            orders = [copy.copy(o) for o in self._data.orders]
            items = list(self._data.order_items)
            return aggregate_period(orders, items, from_ms, to_ms)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_setting(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.settings.get(key) or None

    def set_setting(self, key: str, value: Optional[Any]) -> None:
        """None clears the key."""
        with self._lock:
            if value is None:
                self._data.settings.pop(key, None)
            else:
                self._data.settings[key] = value
            self._enqueue(SettingSet(key=key, value=value))
            self._save()

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def get_client_by_phone(self, phone: Optional[str]) -> Optional[Client]:
        phone = (phone or "").strip()
        if not phone:
            return None
        with self._lock:
            client = self._data.clients.get(phone)
            return copy.copy(client) if client else None

    def set_client_discount(self, phone: Optional[str], discount: Any, notes: Optional[str] = "") -> None:
        phone = (phone or "").strip()
        if not phone:
            return
        with self._lock:
            client = Client(discount=clamp_percent(discount), notes=notes or "")
            self._data.clients[phone] = client
            self._enqueue(ClientSet(phone=phone, discount=client.discount, notes=client.notes))
            self._save()

    def delete_client(self, phone: Optional[str]) -> None:
        phone = (phone or "").strip()
        if not phone:
            return
        with self._lock:
            self._data.clients.pop(phone, None)
            self._enqueue(ClientDeleted(phone=phone))
            self._save()

    def get_all_clients(self) -> List[ClientSummary]:
        with self._lock:
            return build_client_summaries(dict(self._data.clients), list(self._data.orders))

    # ------------------------------------------------------------------
    # Sync hooks (used by SyncWorker)
    # ------------------------------------------------------------------

    def pending_sync_count(self) -> int:
        with self._lock:
            return len(self.queue)

    def take_sync_batch(self) -> List[SyncQueueEntry]:
        """Copy of the queue as it stands now."""
        with self._lock:
            return self.queue.snapshot()

    def acknowledge_sync(self, batch: Iterable[SyncQueueEntry]) -> int:
        with self._lock:
            removed = self.queue.acknowledge(batch)
            self._save()
            return removed

    def _pending_keys(self) -> Dict[str, Set[Any]]:
        keys: Dict[str, Set[Any]] = {"services": set(), "settings": set(), "clients": set()}
        for entry in self.queue.entries():
            change = entry.change
            if isinstance(change, (ServiceAdded, ServiceUpdated)):
                keys["services"].add(change.service.get("id"))
            elif isinstance(change, ServiceDeleted):
                keys["services"].add(change.service_id)
            elif isinstance(change, SettingSet):
                keys["settings"].add(change.key)
            elif isinstance(change, (ClientSet, ClientDeleted)):
                keys["clients"].add(change.phone)
        return keys

    def apply_pull(self, payload: PullPayload) -> None:
        """
        Merge server reference data.

        services: replace the catalog wholesale
        settings: merge key by key (server wins, None clears)
        clients : merge phone by phone (server wins)

        With pull_policy="keep_pending", anything that still has an
        unacknowledged local change is left alone.
        """
        with self._lock:
            keep = self.pull_policy == PULL_KEEP_PENDING
            pending = self._pending_keys() if keep else {"services": set(), "settings": set(), "clients": set()}

            if payload.services is not None:
                pulled: List[Service] = []
                for row in payload.services:
                    try:
                        svc = service_from_dict(row)
                    except (KeyError, TypeError, ValueError) as exc:
                        logger.warning("Ignoring malformed pulled service %r: %s", row, exc)
                        continue
                    if svc.id not in pending["services"]:
                        pulled.append(svc)
                local_pending = [s for s in self._data.services if s.id in pending["services"]]
                pulled_ids = {s.id for s in pulled}
                self._data.services = pulled + [s for s in local_pending if s.id not in pulled_ids]

                top = max((s.id for s in self._data.services), default=0)
                self._data.seq["service"] = max(int(self._data.seq.get("service", 0)), top)

            if payload.settings is not None:
                for key, value in payload.settings.items():
                    if key in pending["settings"]:
                        continue
                    if value is None:
                        self._data.settings.pop(key, None)
                    else:
                        self._data.settings[key] = value

            if payload.clients is not None:
                for phone, data in payload.clients.items():
                    if phone in pending["clients"]:
                        continue
                    if data is None:
                        self._data.clients.pop(phone, None)
                    else:
                        self._data.clients[phone] = client_from_dict(data)

            self._save()
