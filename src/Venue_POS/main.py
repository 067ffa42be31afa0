"""
Venue_POS.main

Simple smoke-test harness for the POS backend.

Run from the src/ directory with:
    python -m Venue_POS.main
"""

import time
from pprint import pprint

from Venue_POS.config_store import AppConfig
from Venue_POS.data.snapshot_store import MemorySnapshotBackend
from Venue_POS.services.admin_password_service import get_global_rules, set_global_rules
from Venue_POS.services.basket_service import Basket
from Venue_POS.services.demo_seed_service import seed_demo_data
from Venue_POS.services.pos_store import PosStore
from Venue_POS.services.receipt_service import render_period_report, render_receipt

DAY_MS = 24 * 60 * 60 * 1000


def run_smoke_test() -> None:
    print("=== Venue POS smoke test starting ===")
    cfg = AppConfig()
    now_ms = int(time.time() * 1000)

    # 1) Seed an in-memory dataset
    print("[1] Seeding demo data...")
    backend = MemorySnapshotBackend()
    counts = seed_demo_data(backend, now_ms=now_ms - 1000, n_orders=25, days_back=7)
    pprint(counts)
    print()

    store = PosStore(backend)

    # 2) Catalog
    print("[2] Catalog:")
    for s in store.get_all_services():
        print(f" - [{s.id}] {s.name}: {s.price:.2f}")
    print()

    # 3) Ring up a sale through the basket
    print("[3] Checking out a basket for client 5550001...")
    set_global_rules(store, "Купание запрещено.\nМусор уносим с собой.")
    basket = Basket()
    sauna = store.search_services("баня")[0].service
    basket.add_item(sauna, 2)
    basket.set_phone(store, "5550001")
    items = list(basket.items)
    phone, discount = basket.phone, basket.discount
    ref = basket.checkout(store)
    order = store.get_order(ref.id)
    print(render_receipt(ref.display_id, order.datetime, items, phone, discount, get_global_rules(store), cfg))

    # 4) Weekly report
    print("[4] Report for the last 7 days:")
    stats = store.get_stats_by_period(now_ms - 7 * DAY_MS, now_ms + DAY_MS)
    summaries = {o.id: store.get_order_summary(o.id) for o in stats.orders}
    print(render_period_report(stats, now_ms - 7 * DAY_MS, now_ms, summaries, now_ms, cfg))

    # 5) Clients
    print("[5] Top clients:")
    for c in store.get_all_clients()[:5]:
        print(f" - {c.phone}: visits={c.visits} spend={c.total_spend:.2f} discount={c.discount}%")
    print()

    print(f"Pending sync changes: {store.pending_sync_count()}")
    print("=== Smoke test complete ===")


if __name__ == "__main__":
    run_smoke_test()
