"""
Venue_POS.services.demo_seed_service

Demo seeder for the POS.

Creates:
- a small catalog of venue services
- a few regular clients with discounts
- ~N orders spread across the last `days_back` days

Designed to be deterministic (same seed = same dataset) so demos are repeatable.
Demo data is written with sync disabled, so it never reaches the server.

Usage:
    backend = MemorySnapshotBackend()
    seed_demo_data(backend, now_ms=int(time.time() * 1000), n_orders=60, seed=42)
    store = PosStore(backend)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from Venue_POS.data.snapshot_store import SnapshotBackend
from Venue_POS.domain.models import BasketItem
from Venue_POS.services.pos_store import PosStore
from Venue_POS.utils.ids import IdStrategy, UuidIdStrategy

DAY_MS = 24 * 60 * 60 * 1000


# -----------------------------
# Demo catalog
# -----------------------------

@dataclass(frozen=True)
class DemoServiceSpec:
    name: str
    price: float
    rules: Optional[str] = None


def _demo_services() -> List[DemoServiceSpec]:
    return [
        DemoServiceSpec("Баня (1 час)", 1500.0, "Не более 6 человек"),
        DemoServiceSpec("Беседка малая", 800.0),
        DemoServiceSpec("Беседка большая", 1500.0),
        DemoServiceSpec("Мангал", 300.0, "Уголь не включён"),
        DemoServiceSpec("Рыбалка (взрослый)", 500.0, "Улов до 3 кг"),
        DemoServiceSpec("Рыбалка (детский)", 250.0),
        DemoServiceSpec("Лодка (1 час)", 400.0),
        DemoServiceSpec("Вход на территорию", 200.0),
    ]


def _demo_clients() -> Dict[str, tuple]:
    return {
        "5550001": (10, "regular"),
        "5550002": (5, ""),
        "5550003": (15, "staff family"),
    }


class _DemoClock:
    """Settable epoch-ms clock so seeded orders land on past days."""

    def __init__(self, now_ms: int) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


# -----------------------------
# Seeding
# -----------------------------

def seed_demo_data(
    backend: SnapshotBackend,
    now_ms: int,
    n_orders: int = 60,
    days_back: int = 30,
    seed: int = 42,
    id_strategy: Optional[IdStrategy] = None,
) -> Dict[str, int]:
    """
    Seed the given backend with a small, believable dataset.

    Returns counts:
        {"services": 8, "clients": 3, "orders": 60}
    """
    rng = random.Random(seed)
    clock = _DemoClock(now_ms - days_back * DAY_MS)
    store = PosStore(
        backend,
        id_strategy=id_strategy or UuidIdStrategy(rng),
        clock=clock,
        sync_enabled=False,
    )

    # 1) Catalog
    for spec in _demo_services():
        store.add_service(spec.name, spec.price, spec.rules)
    services = store.get_all_services()

    # 2) Clients
    clients = _demo_clients()
    for phone, (discount, notes) in clients.items():
        store.set_client_discount(phone, discount, notes)
    phones = list(clients.keys()) + ["5550100", "5550101"]

    # 3) Orders, oldest first so datetimes stay increasing
    offsets = sorted(rng.randint(0, max(1, days_back) * DAY_MS) for _ in range(n_orders))
    for offset in offsets:
        clock.now_ms = now_ms - days_back * DAY_MS + offset

        picks = rng.sample(services, k=rng.randint(1, 3))
        items = [
            BasketItem(
                service_id=s.id,
                service_name=s.name,
                service_price=s.price,
                quantity=rng.randint(1, 4),
            )
            for s in picks
        ]

        phone = rng.choice(phones) if rng.random() < 0.4 else ""
        client = store.get_client_by_phone(phone)
        store.create_order(items, phone, client.discount if client else 0)

    return {
        "services": len(services),
        "clients": len(clients),
        "orders": n_orders,
    }
