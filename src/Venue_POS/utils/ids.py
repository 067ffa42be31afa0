"""
Venue_POS.utils.ids

Identifier generation for orders and order items.

Two deployment modes:
- "uuid": every device mints its own random v4-style ids, so two tablets can
  sell offline at the same time without clashing. A short display code (the
  second hyphen group) is printed on receipts. It is NOT unique.
- "sequential": a local counter in the dataset's _seq block. Only safe when a
  single device writes.
"""

from __future__ import annotations

import random
from typing import Dict, Tuple, Union

OrderId = Union[int, str]

ID_MODE_UUID = "uuid"
ID_MODE_SEQUENTIAL = "sequential"
ID_MODES = (ID_MODE_UUID, ID_MODE_SEQUENTIAL)

_HEX = "0123456789abcdef"
_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"


def generate_uuid(rng: random.Random = None) -> str:
    """
    36-char id in the UUID v4 layout (version nibble 4, variant in 8/9/a/b).

    Uses the plain `random` module (not cryptographically strong).
    """
    rng = rng or random
    out = []
    for c in _TEMPLATE:
        if c == "x":
            out.append(_HEX[rng.randrange(16)])
        elif c == "y":
            out.append(_HEX[(rng.randrange(16) & 0x3) | 0x8])
        else:
            out.append(c)
    return "".join(out)


def short_id(uuid: str) -> str:
    """
    Human-readable receipt code: second hyphen group of the uuid.
    """
    parts = (uuid or "").split("-")
    return parts[1] if len(parts) > 1 else uuid


class IdStrategy:
    """
    Issues ids for new orders and order items.

    `seq` is the dataset's mutable _seq dict; sequential strategies bump it.
    """

    mode: str = ""

    def new_order_id(self, seq: Dict[str, int]) -> Tuple[OrderId, str]:
        """Return (order_id, display_code)."""
        raise NotImplementedError

    def new_item_id(self, seq: Dict[str, int]) -> OrderId:
        raise NotImplementedError


class UuidIdStrategy(IdStrategy):
    mode = ID_MODE_UUID

    def __init__(self, rng: random.Random = None) -> None:
        self.rng = rng

    def new_order_id(self, seq: Dict[str, int]) -> Tuple[OrderId, str]:
        uuid = generate_uuid(self.rng)
        return uuid, short_id(uuid)

    def new_item_id(self, seq: Dict[str, int]) -> OrderId:
        return generate_uuid(self.rng)


class SequentialIdStrategy(IdStrategy):
    mode = ID_MODE_SEQUENTIAL

    def new_order_id(self, seq: Dict[str, int]) -> Tuple[OrderId, str]:
        seq["order"] = int(seq.get("order", 0)) + 1
        return seq["order"], str(seq["order"])

    def new_item_id(self, seq: Dict[str, int]) -> OrderId:
        seq["item"] = int(seq.get("item", 0)) + 1
        return seq["item"]


def make_id_strategy(mode: str, rng: random.Random = None) -> IdStrategy:
    if mode == ID_MODE_SEQUENTIAL:
        return SequentialIdStrategy()
    if mode == ID_MODE_UUID:
        return UuidIdStrategy(rng)
    raise ValueError(f"Unknown id mode: {mode!r}")
