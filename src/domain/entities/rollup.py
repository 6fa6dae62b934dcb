"""Derived aggregate types computed from the order stream."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class CustomerSummary:
    """Per-customer rollup keyed by email."""

    email: str
    name: str
    phone: str = "N/A"
    total_orders: int = 0
    last_order: str = "N/A"
    last_order_date: datetime | None = None
    user_id: str | None = None


@dataclass(frozen=True, slots=True)
class CustomerStats:
    """Headline numbers for the customer page."""

    total_customers: int
    active_customers: int
    new_customers: int
    total_orders: int


@dataclass
class ProductSales:
    """Per-product sales rollup keyed by product name."""

    name: str
    total_sold: int = 0
    revenue: float = 0.0


@dataclass
class HourlyBucket:
    """Sales and order count for one hour of the day."""

    hour: int
    sales: float = 0.0
    order_count: int = 0

    @property
    def label(self) -> str:
        return f"{self.hour}:00"


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    """Totals over the date-filtered order subset."""

    total_revenue: float
    order_count: int
    status_breakdown: dict[str, int] = field(default_factory=dict)
