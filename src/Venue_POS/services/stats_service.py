"""
Venue_POS.services.stats_service

Read-side aggregation over orders: revenue per period and per-client
visit statistics. Pure functions over lists, no storage access.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from Venue_POS.domain.models import (
    Client,
    ClientSummary,
    Order,
    OrderItem,
    PeriodStats,
    ServiceStats,
)


def orders_in_range(orders: Iterable[Order], from_ms: int, to_ms: int) -> List[Order]:
    """
    Orders with from_ms <= datetime <= to_ms, newest first.
    """
    picked = [o for o in orders if from_ms <= o.datetime <= to_ms]
    picked.sort(key=lambda o: o.datetime, reverse=True)
    return picked


def aggregate_period(
    orders: Iterable[Order],
    order_items: Iterable[OrderItem],
    from_ms: int,
    to_ms: int,
) -> PeriodStats:
    """
    Revenue is the gross line total (price * qty) of items sold in the
    period; order-level discounts are not subtracted here.
    """
    in_range = orders_in_range(orders, from_ms, to_ms)
    order_ids = {o.id for o in in_range}

    stats = PeriodStats(order_count=len(order_ids), orders=in_range)
    by_name: Dict[str, ServiceStats] = {}

    for item in order_items:
        if item.order_id not in order_ids:
            continue
        line = item.line_total
        stats.revenue += line
        stats.item_count += item.quantity

        row = by_name.get(item.service_name)
        if row is None:
            row = by_name[item.service_name] = ServiceStats(service_name=item.service_name)
        row.total_qty += item.quantity
        row.total_revenue += line

    stats.by_service = sorted(by_name.values(), key=lambda r: r.total_revenue, reverse=True)
    return stats


def build_client_summaries(
    clients: Mapping[str, Client],
    orders: Iterable[Order],
) -> List[ClientSummary]:
    """
    Every phone that has a client record or appears on any order, with
    visits / spend / last visit derived from orders. Most visits first.
    """
    derived: Dict[str, ClientSummary] = {}
    for o in orders:
        if not o.phone:
            continue
        row = derived.get(o.phone)
        if row is None:
            row = derived[o.phone] = ClientSummary(phone=o.phone)
        row.visits += 1
        row.total_spend += o.total
        if o.datetime > row.last_visit:
            row.last_visit = o.datetime

    phones = list(clients.keys()) + [p for p in derived if p not in clients]

    out: List[ClientSummary] = []
    for phone in phones:
        client = clients.get(phone)
        row = derived.get(phone) or ClientSummary(phone=phone)
        if client is not None:
            row.discount = client.discount
            row.notes = client.notes
        out.append(row)

    out.sort(key=lambda r: r.visits, reverse=True)
    return out
