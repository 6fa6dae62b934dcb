"""Pydantic schemas for the sales dashboard API."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.order import OrderResponse


class ProductSalesResponse(BaseModel):
    """Units sold and revenue for one product."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    total_sold: int
    revenue: float


class TopSellersResponse(BaseModel):
    data: list[ProductSalesResponse]


class HourlyBucketResponse(BaseModel):
    """Sales for one hour of the day."""

    hour: int
    label: str
    sales: float
    order_count: int


class SalesSummaryResponse(BaseModel):
    total_revenue: float
    order_count: int
    status_breakdown: dict[str, int]


class DateRangeUpdate(BaseModel):
    """Calendar days in the shop timezone; ``end`` defaults to ``start``."""

    start: date
    end: date | None = None


class SalesResponse(BaseModel):
    """Hourly histogram and totals for a date range."""

    start: datetime
    end: datetime
    hourly: list[HourlyBucketResponse]
    summary: SalesSummaryResponse


class RecentOrdersResponse(BaseModel):
    """One page of the orders inside a date range."""

    data: list[OrderResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
