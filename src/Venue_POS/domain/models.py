"""
Venue_POS.domain.models

Dataclasses representing the core domain objects of the POS.
These are the types the store returns and services operate on.

Timestamps are epoch milliseconds (int), money is float rounded to cents.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

OrderId = Union[int, str]


# ---------- Catalog ----------

@dataclass
class Service:
    id: int
    name: str
    price: float
    rules: Optional[str] = None


# ---------- Orders ----------

@dataclass
class Order:
    id: OrderId
    datetime: int                 # epoch ms, set at creation
    total: float
    phone: str = ""
    discount: int = 0             # percent 0-100
    short_id: Optional[str] = None  # display only, never a lookup key

    @property
    def display_id(self) -> str:
        return self.short_id or str(self.id)


@dataclass
class OrderItem:
    id: OrderId
    order_id: OrderId
    service_id: Optional[int]
    service_name: str             # copied at time of sale
    service_price: float          # copied at time of sale
    quantity: int

    @property
    def line_total(self) -> float:
        return self.service_price * self.quantity


@dataclass
class BasketItem:
    """
    One line the cashier wants to sell. Input to create_order / update_order.
    """
    service_id: Optional[int]
    service_name: str
    service_price: float
    quantity: int


@dataclass(frozen=True)
class OrderRef:
    """
    What create_order hands back: the real id plus the code to print.
    """
    id: OrderId
    display_id: str


# ---------- Clients ----------

@dataclass
class Client:
    discount: int = 0
    notes: str = ""


@dataclass
class ClientSummary:
    phone: str
    discount: int = 0
    notes: str = ""
    visits: int = 0
    total_spend: float = 0.0
    last_visit: int = 0


# ---------- Stats ----------

@dataclass
class ServiceStats:
    service_name: str
    total_qty: int = 0
    total_revenue: float = 0.0


@dataclass
class PeriodStats:
    revenue: float = 0.0
    order_count: int = 0
    item_count: int = 0
    by_service: List[ServiceStats] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
