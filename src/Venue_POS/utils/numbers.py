"""
Venue_POS.utils.numbers

Lenient numeric coercion used by the store.

The UI hands us whatever the user typed; the store never raises on bad
numbers, it collapses them to 0 instead.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

_CENTS = Decimal("0.01")


def to_number(value: Any) -> float:
    """
    Coerce value to float. None, blanks, garbage, NaN and infinities -> 0.0.
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        num = float(str(value).strip() or 0) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def clamp_percent(value: Any) -> int:
    """
    Discount percentage as an int in [0, 100].
    """
    num = to_number(value)
    num = min(100.0, max(0.0, num))
    return int(num)


def round2(value: Any) -> float:
    """
    Round half-up to 2 decimal places (what a cashier expects on a receipt).
    """
    try:
        dec = Decimal(repr(to_number(value)))
    except InvalidOperation:
        return 0.0
    return float(dec.quantize(_CENTS, rounding=ROUND_HALF_UP))


def apply_discount(subtotal: float, discount_pct: int) -> float:
    return round2(subtotal * (1 - discount_pct / 100))
