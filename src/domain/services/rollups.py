"""Derived views over the order stream: customers, top sellers and hourly sales.

Every fold runs over the complete order set delivered by a snapshot and
builds its result from scratch; the views swap the new result in whole.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta
from enum import StrEnum
from typing import TypeVar
from zoneinfo import ZoneInfo

import structlog

from domain.entities.document import Collections, Snapshot
from domain.entities.records import OrderRecord, OrderStatus
from domain.entities.rollup import (
    CustomerStats,
    CustomerSummary,
    DashboardSummary,
    HourlyBucket,
    ProductSales,
)
from domain.entities.session import AdminSession
from domain.repositories.live_query import ILiveQuerySource, Subscription
from domain.repositories.outbound import ITopSellersPublisher

logger = structlog.get_logger()

T = TypeVar("T")

TOP_SELLERS_LIMIT = 5
ACTIVE_CUSTOMER_MIN_ORDERS = 5
NEW_CUSTOMER_MAX_ORDERS = 2


class CustomerSort(StrEnum):
    """Customer list orderings."""

    NAME = "name"
    ORDERS = "orders"
    RECENT = "recent"


class CustomerSegment(StrEnum):
    """Customer list filters by order count."""

    ALL = "all"
    ACTIVE = "active"
    NEW = "new"


# --- Folds ---


def fold_customers(orders: Iterable[OrderRecord]) -> dict[str, CustomerSummary]:
    """Group orders by customer email.

    The first order seen for an email fixes the customer's details, so with
    input ordered newest first they come from the latest order. Orders
    without an email are skipped.
    """
    customers: dict[str, CustomerSummary] = {}
    for order in orders:
        email = order.customer_email
        if not email:
            continue
        summary = customers.get(email)
        if summary is None:
            summary = CustomerSummary(
                email=email,
                name=order.customer_name or "",
                phone=order.customer_phone or "N/A",
                last_order=order.timestamp.date().isoformat() if order.timestamp else "N/A",
                last_order_date=order.timestamp,
                user_id=order.user_id,
            )
            customers[email] = summary
        summary.total_orders += 1
    return customers


def sort_customers(
    customers: Iterable[CustomerSummary],
    sort_by: CustomerSort = CustomerSort.NAME,
) -> list[CustomerSummary]:
    """Order customers by name, order count (desc) or most recent order (desc)."""
    items = list(customers)
    if sort_by is CustomerSort.ORDERS:
        return sorted(items, key=lambda c: c.total_orders, reverse=True)
    if sort_by is CustomerSort.RECENT:
        # Customers without a dated order sort last.
        return sorted(
            items,
            key=lambda c: c.last_order_date.timestamp() if c.last_order_date else float("-inf"),
            reverse=True,
        )
    return sorted(items, key=lambda c: c.name.casefold())


def filter_customers(
    customers: Iterable[CustomerSummary],
    search: str = "",
    segment: CustomerSegment = CustomerSegment.ALL,
    active_min_orders: int = ACTIVE_CUSTOMER_MIN_ORDERS,
    new_max_orders: int = NEW_CUSTOMER_MAX_ORDERS,
) -> list[CustomerSummary]:
    """Keep customers whose name or email contains ``search`` and who fall in ``segment``."""
    needle = search.casefold()
    result: list[CustomerSummary] = []
    for customer in customers:
        haystacks = (customer.name.casefold(), customer.email.casefold())
        if needle and not any(needle in h for h in haystacks):
            continue
        if segment is CustomerSegment.ACTIVE and customer.total_orders < active_min_orders:
            continue
        if segment is CustomerSegment.NEW and customer.total_orders > new_max_orders:
            continue
        result.append(customer)
    return result


def customer_stats(
    customers: Sequence[CustomerSummary],
    active_min_orders: int = ACTIVE_CUSTOMER_MIN_ORDERS,
    new_max_orders: int = NEW_CUSTOMER_MAX_ORDERS,
) -> CustomerStats:
    return CustomerStats(
        total_customers=len(customers),
        active_customers=sum(1 for c in customers if c.total_orders >= active_min_orders),
        new_customers=sum(1 for c in customers if c.total_orders <= new_max_orders),
        total_orders=sum(c.total_orders for c in customers),
    )


def fold_top_sellers(
    orders: Iterable[OrderRecord],
    limit: int = TOP_SELLERS_LIMIT,
) -> list[ProductSales]:
    """Sum units sold and revenue per product name; return the best sellers.

    A line without a price contributes the whole order total as revenue.
    Ties on units sold keep encounter order.
    """
    sales: dict[str, ProductSales] = {}
    for order in orders:
        for item in order.line_items:
            entry = sales.setdefault(item.name, ProductSales(name=item.name))
            entry.total_sold += item.quantity
            if item.price is not None:
                entry.revenue += item.price * item.quantity
            else:
                entry.revenue += order.total_amount
    ranked = sorted(sales.values(), key=lambda s: s.total_sold, reverse=True)
    return ranked[:limit]


def filter_orders_by_date(
    orders: Iterable[OrderRecord],
    start: datetime,
    end: datetime,
) -> list[OrderRecord]:
    """Orders timestamped within ``[start, end]``. Orders without a timestamp are excluded."""
    return [o for o in orders if o.timestamp is not None and start <= o.timestamp <= end]


def fold_hourly(orders: Iterable[OrderRecord], tz: ZoneInfo) -> list[HourlyBucket]:
    """Bucket order totals and counts by hour of day in ``tz``."""
    buckets = [HourlyBucket(hour=hour) for hour in range(24)]
    for order in orders:
        if order.timestamp is None:
            continue
        bucket = buckets[order.timestamp.astimezone(tz).hour]
        bucket.sales += order.total_amount
        bucket.order_count += 1
    return buckets


def summarize(orders: Sequence[OrderRecord]) -> DashboardSummary:
    """Revenue, count and non-empty status counts for an order subset."""
    breakdown = {
        status: sum(1 for o in orders if o.status == status) for status in OrderStatus.ALL
    }
    return DashboardSummary(
        total_revenue=sum(o.total_amount for o in orders),
        order_count=len(orders),
        status_breakdown={status: count for status, count in breakdown.items() if count},
    )


def paginate(items: Sequence[T], page: int, per_page: int) -> list[T]:
    """One 1-based page of ``items``."""
    start = (max(page, 1) - 1) * per_page
    return list(items[start : start + per_page])


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """First and last instant of ``day`` in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def _orders_from(snapshot: Snapshot) -> list[OrderRecord]:
    return [OrderRecord.from_document(d) for d in snapshot.documents]


# --- Views ---


class CustomerRollupView:
    """Customers derived from every order, refolded on each snapshot."""

    def __init__(
        self,
        source: ILiveQuerySource,
        active_min_orders: int = ACTIVE_CUSTOMER_MIN_ORDERS,
        new_max_orders: int = NEW_CUSTOMER_MAX_ORDERS,
    ) -> None:
        self._source = source
        self._active_min_orders = active_min_orders
        self._new_max_orders = new_max_orders
        self._customers: dict[str, CustomerSummary] = {}

    async def subscribe(self, source: ILiveQuerySource, session: AdminSession) -> list[Subscription]:
        return [await source.subscribe(Collections.ORDERS, self.handle_snapshot, descending=True)]

    async def handle_snapshot(self, snapshot: Snapshot) -> None:
        self._customers = fold_customers(_orders_from(snapshot))

    def list_customers(
        self,
        sort_by: CustomerSort = CustomerSort.NAME,
        segment: CustomerSegment = CustomerSegment.ALL,
        search: str = "",
    ) -> list[CustomerSummary]:
        filtered = filter_customers(
            self._customers.values(),
            search=search,
            segment=segment,
            active_min_orders=self._active_min_orders,
            new_max_orders=self._new_max_orders,
        )
        return sort_customers(filtered, sort_by)

    def stats(self) -> CustomerStats:
        return customer_stats(
            list(self._customers.values()),
            active_min_orders=self._active_min_orders,
            new_max_orders=self._new_max_orders,
        )

    def get(self, email: str) -> CustomerSummary | None:
        return self._customers.get(email)

    async def order_history(self, customer: CustomerSummary) -> list[OrderRecord]:
        """All orders placed under the customer's user id, newest first."""
        if not customer.user_id:
            return []
        try:
            documents = await self._source.query(
                Collections.ORDERS,
                where={"userId": customer.user_id},
                descending=True,
            )
        except Exception:
            logger.exception("customer_order_history_failed", email=customer.email)
            return []
        return [OrderRecord.from_document(d) for d in documents]


class TopSellersView:
    """Best-selling products, pushed to a cache document whenever they change.

    The push is best effort: a failed write is logged and not retried on its
    own. The next snapshot attempts it again.
    """

    def __init__(self, publisher: ITopSellersPublisher, limit: int = TOP_SELLERS_LIMIT) -> None:
        self._publisher = publisher
        self._limit = limit
        self._top_sellers: list[ProductSales] = []
        self._published: list[str] | None = None

    @property
    def top_sellers(self) -> list[ProductSales]:
        return list(self._top_sellers)

    async def subscribe(self, source: ILiveQuerySource, session: AdminSession) -> list[Subscription]:
        return [await source.subscribe(Collections.ORDERS, self.handle_snapshot, descending=True)]

    async def handle_snapshot(self, snapshot: Snapshot) -> None:
        self._top_sellers = fold_top_sellers(_orders_from(snapshot), self._limit)
        names = [s.name for s in self._top_sellers]
        if names and names != self._published:
            await self._publish(names)

    async def _publish(self, names: list[str]) -> None:
        try:
            await self._publisher.publish(names)
        except Exception:
            logger.exception("top_sellers_publish_failed", product_names=names)
            return
        self._published = names
        logger.info("top_sellers_published", product_names=names)


class SalesDashboardView:
    """Hourly histogram and totals over the orders inside the active date range."""

    def __init__(self, tz: ZoneInfo, per_page: int = 5) -> None:
        self._tz = tz
        self._per_page = per_page
        self._orders: list[OrderRecord] = []
        self._start, self._end = day_bounds(datetime.now(tz).date(), tz)
        self._filtered: list[OrderRecord] = []
        self._hourly: list[HourlyBucket] = fold_hourly([], tz)

    @property
    def timezone(self) -> ZoneInfo:
        return self._tz

    @property
    def date_range(self) -> tuple[datetime, datetime]:
        return self._start, self._end

    @property
    def hourly(self) -> list[HourlyBucket]:
        return list(self._hourly)

    @property
    def filtered_orders(self) -> list[OrderRecord]:
        return list(self._filtered)

    def orders_between(self, start: datetime, end: datetime) -> list[OrderRecord]:
        """Orders within ``[start, end]``, leaving the active range untouched."""
        return filter_orders_by_date(self._orders, start, end)

    def summary(self) -> DashboardSummary:
        return summarize(self._filtered)

    def recent_orders(
        self,
        page: int = 1,
        bounds: tuple[datetime, datetime] | None = None,
    ) -> tuple[list[OrderRecord], int]:
        """One page of the orders in ``bounds`` (the active range by default) and the page count."""
        orders = self._filtered if bounds is None else self.orders_between(*bounds)
        total_pages = -(-len(orders) // self._per_page)
        return paginate(orders, page, self._per_page), total_pages

    def set_date_range(self, start: datetime, end: datetime) -> None:
        self._start, self._end = start, end
        self._refold()

    async def subscribe(self, source: ILiveQuerySource, session: AdminSession) -> list[Subscription]:
        return [await source.subscribe(Collections.ORDERS, self.handle_snapshot, descending=True)]

    async def handle_snapshot(self, snapshot: Snapshot) -> None:
        self._orders = _orders_from(snapshot)
        self._refold()

    def _refold(self) -> None:
        filtered = filter_orders_by_date(self._orders, self._start, self._end)
        self._hourly = fold_hourly(filtered, self._tz)
        self._filtered = filtered
