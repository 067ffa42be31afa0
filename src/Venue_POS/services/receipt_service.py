"""
Venue_POS.services.receipt_service

Plain-text documents for the 80 mm receipt printer:
- render_receipt(): the ticket handed to the visitor
- render_period_report(): the admin's revenue report for a date range

Pure functions of their inputs; nothing here touches the store.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Mapping, Optional

from Venue_POS.config_store import AppConfig
from Venue_POS.domain.models import PeriodStats
from Venue_POS.utils.numbers import apply_discount, clamp_percent, round2

RECEIPT_WIDTH = 42
CURRENCY = "₽"


# ---- Formatting helpers ----------------------------------------------------


def format_money(value: float) -> str:
    """1234.5 -> '1 234.50'"""
    return f"{round2(value):,.2f}".replace(",", " ")


def format_datetime(ms: int, tz: Optional[tzinfo] = None) -> str:
    """Epoch ms -> 'DD.MM.YYYY HH:MM' (local time unless tz given)."""
    return datetime.fromtimestamp(ms / 1000, tz=tz).strftime("%d.%m.%Y %H:%M")


def _center(text: str, width: int = RECEIPT_WIDTH) -> str:
    return text.strip().center(width).rstrip()


def _row(left: str, right: str, width: int = RECEIPT_WIDTH) -> str:
    gap = width - len(left) - len(right)
    if gap < 1:
        # Long service names wrap: name on its own line, amount right-aligned below
        return f"{left}\n{right.rjust(width)}"
    return f"{left}{' ' * gap}{right}"


def _rule(width: int = RECEIPT_WIDTH) -> str:
    return "-" * width


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name)


# ---- Receipt ---------------------------------------------------------------


def render_receipt(
    display_id: str,
    datetime_ms: int,
    items: Iterable[Any],
    phone: Optional[str] = "",
    discount_pct: Any = 0,
    global_rules: Optional[str] = "",
    config: Optional[AppConfig] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    items: BasketItem / OrderItem objects or dicts with service_name,
    service_price and quantity.
    """
    cfg = config or AppConfig()
    discount = clamp_percent(discount_pct)

    lines: List[str] = [_center(cfg.org_name)]
    if cfg.org_subtitle:
        lines.append(_center(cfg.org_subtitle.upper()))
    lines.append(_center(f"{format_datetime(datetime_ms, tz)}  Билет №{display_id}"))
    if phone:
        lines.append(_center(f"Тел.: {phone}"))
    lines.append(_rule())

    subtotal = 0.0
    for item in items:
        name = str(_field(item, "service_name"))
        price = float(_field(item, "service_price"))
        qty = int(_field(item, "quantity"))
        line_total = price * qty
        subtotal += line_total
        lines.append(_row(f"{name} ×{qty}", f"{format_money(line_total)} {CURRENCY}"))

    total = apply_discount(subtotal, discount)
    if discount > 0:
        lines.append(_row(f"Скидка {discount}%", f"-{format_money(subtotal - total)} {CURRENCY}"))

    lines.append(_rule())
    lines.append(f"ИТОГО: {format_money(total)} {CURRENCY}".rjust(RECEIPT_WIDTH))

    if global_rules and global_rules.strip():
        lines.append(_rule())
        lines.append(_center("--- ПРАВИЛА ТЕРРИТОРИИ ---"))
        lines.extend(global_rules.strip().splitlines())

    lines.append(_rule())
    if cfg.footer_text:
        lines.append(_center(cfg.footer_text))

    return "\n".join(lines) + "\n"


# ---- Period report ---------------------------------------------------------


def render_period_report(
    stats: PeriodStats,
    from_ms: int,
    to_ms: int,
    order_summaries: Optional[Mapping[Any, str]] = None,
    printed_at_ms: Optional[int] = None,
    config: Optional[AppConfig] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Revenue report: per-service table, order list, grand total.

    order_summaries maps order id -> "name ×qty, ..." (PosStore.get_order_summary).
    """
    cfg = config or AppConfig()
    summaries = order_summaries or {}

    lines: List[str] = [
        _center(cfg.org_name),
        _center("ОТЧЁТ ПО ВЫРУЧКЕ"),
        _center(f"{format_datetime(from_ms, tz)} — {format_datetime(to_ms, tz)}"),
        _rule(),
        "По услугам:",
    ]

    if stats.by_service:
        for row in stats.by_service:
            lines.append(_row(f"  {row.service_name} ×{row.total_qty}", f"{format_money(row.total_revenue)} {CURRENCY}"))
    else:
        lines.append("  Нет данных")

    lines.append(_rule())
    lines.append(f"Заказы ({stats.order_count}):")
    if stats.orders:
        for order in stats.orders:
            lines.append(
                _row(
                    f"  #{order.display_id} {format_datetime(order.datetime, tz)}",
                    f"{format_money(order.total)} {CURRENCY}",
                )
            )
            summary = summaries.get(order.id)
            if summary:
                lines.append(f"    {summary}")
    else:
        lines.append("  Нет заказов")

    lines.append(_rule())
    lines.append(_row("Позиций:", str(stats.item_count)))
    lines.append(_row("ВЫРУЧКА:", f"{format_money(stats.revenue)} {CURRENCY}"))

    if printed_at_ms is not None:
        lines.append(_rule())
        lines.append(_center(f"Распечатано: {format_datetime(printed_at_ms, tz)}"))

    return "\n".join(lines) + "\n"
