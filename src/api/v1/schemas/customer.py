"""Pydantic schemas for the customer rollup API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.order import OrderResponse


class CustomerResponse(BaseModel):
    """One customer, derived from their orders."""

    model_config = ConfigDict(from_attributes=True)

    email: str
    name: str
    phone: str
    total_orders: int
    last_order: str
    last_order_date: datetime | None = None


class CustomerListResponse(BaseModel):
    """One page of customers."""

    data: list[CustomerResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class CustomerStatsResponse(BaseModel):
    """Headline numbers for the customer page."""

    model_config = ConfigDict(from_attributes=True)

    total_customers: int
    active_customers: int
    new_customers: int
    total_orders: int


class CustomerOrdersResponse(BaseModel):
    """A customer's order history."""

    customer: CustomerResponse
    data: list[OrderResponse]
