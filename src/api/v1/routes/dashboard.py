"""Sales dashboard API routes."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_sales_view, get_top_sellers_view
from api.v1.schemas.dashboard import (
    DateRangeUpdate,
    HourlyBucketResponse,
    ProductSalesResponse,
    RecentOrdersResponse,
    SalesResponse,
    SalesSummaryResponse,
    TopSellersResponse,
)
from api.v1.schemas.order import OrderResponse
from core.exceptions import InvalidDateRangeError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.rollup import DashboardSummary, HourlyBucket
from domain.services.rollups import (
    SalesDashboardView,
    TopSellersView,
    day_bounds,
    fold_hourly,
    summarize,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _resolve_range(
    view: SalesDashboardView,
    start: date | None,
    end: date | None,
) -> tuple[datetime, datetime] | None:
    """Instants spanning the given days; a missing bound defaults to the other."""
    start = start or end
    end = end or start
    if start is None or end is None:
        return None
    if start > end:
        raise InvalidDateRangeError(start.isoformat(), end.isoformat())
    tz = view.timezone
    return day_bounds(start, tz)[0], day_bounds(end, tz)[1]


def _sales_response(
    bounds: tuple[datetime, datetime],
    hourly: list[HourlyBucket],
    summary: DashboardSummary,
) -> SalesResponse:
    return SalesResponse(
        start=bounds[0],
        end=bounds[1],
        hourly=[
            HourlyBucketResponse(
                hour=b.hour, label=b.label, sales=b.sales, order_count=b.order_count
            )
            for b in hourly
        ],
        summary=SalesSummaryResponse(
            total_revenue=summary.total_revenue,
            order_count=summary.order_count,
            status_breakdown=summary.status_breakdown,
        ),
    )


def _active_sales(view: SalesDashboardView) -> SalesResponse:
    return _sales_response(view.date_range, view.hourly, view.summary())


@router.get(
    "/top-sellers",
    response_model=TopSellersResponse,
    summary="Best-selling products",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_top_sellers(
    request: Request,
    user: CurrentUser,
    view: TopSellersView = Depends(get_top_sellers_view),
) -> TopSellersResponse:
    return TopSellersResponse(
        data=[ProductSalesResponse.model_validate(s) for s in view.top_sellers]
    )


@router.get(
    "/sales",
    response_model=SalesResponse,
    summary="Hourly sales for a date range",
    responses={400: {"description": "start is after end"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_sales(
    request: Request,
    user: CurrentUser,
    start: date | None = Query(None, description="First day, in the shop timezone"),
    end: date | None = Query(None, description="Last day, in the shop timezone"),
    view: SalesDashboardView = Depends(get_sales_view),
) -> SalesResponse:
    """Hourly histogram and totals.

    Without ``start`` or ``end`` this reports the dashboard's active range.
    A missing bound defaults to the other one.
    """
    bounds = _resolve_range(view, start, end)
    if bounds is None:
        return _active_sales(view)
    orders = view.orders_between(*bounds)
    return _sales_response(bounds, fold_hourly(orders, view.timezone), summarize(orders))


@router.put(
    "/date-range",
    response_model=SalesResponse,
    summary="Move the dashboard's active date range",
    responses={400: {"description": "start is after end"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_date_range(
    request: Request,
    body: DateRangeUpdate,
    user: CurrentUser,
    view: SalesDashboardView = Depends(get_sales_view),
) -> SalesResponse:
    """Set the range that the sales and recent-orders reads default to."""
    bounds = _resolve_range(view, body.start, body.end)
    if bounds is not None:
        view.set_date_range(*bounds)
    return _active_sales(view)


@router.get(
    "/recent-orders",
    response_model=RecentOrdersResponse,
    summary="Orders in a date range",
    responses={400: {"description": "start is after end"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_recent_orders(
    request: Request,
    user: CurrentUser,
    page: int = Query(1, ge=1),
    start: date | None = Query(None, description="First day, in the shop timezone"),
    end: date | None = Query(None, description="Last day, in the shop timezone"),
    view: SalesDashboardView = Depends(get_sales_view),
) -> RecentOrdersResponse:
    """One page of orders, newest first, in the given or the active range."""
    orders, total_pages = view.recent_orders(page, _resolve_range(view, start, end))
    return RecentOrdersResponse(
        data=[OrderResponse.from_record(o) for o in orders],
        meta={"page": page, "total_pages": total_pages},
    )
