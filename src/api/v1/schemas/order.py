"""Pydantic schemas for Order API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.records import OrderRecord


class LineItemSchema(BaseModel):
    """One product line of a new order."""

    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(default=1, ge=1)
    price: float | None = Field(default=None, ge=0)


class LineItemResponse(BaseModel):
    """One product line as stored; values are reported as found."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    quantity: int
    price: float | None = None


class OrderCreate(BaseModel):
    """Schema for placing an order."""

    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    customer_phone: str | None = Field(default=None, max_length=50)
    items: list[LineItemSchema] = Field(..., min_length=1)
    total_amount: float | None = Field(default=None, ge=0)


class OrderStatusUpdate(BaseModel):
    """Schema for changing an order's status."""

    status: str = Field(..., description="Pending, Processing, Delivered or Cancelled")


class OrderResponse(BaseModel):
    """An order as read from the order stream."""

    id: str
    timestamp: datetime | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    total_amount: float
    status: str
    items: list[LineItemResponse]

    @classmethod
    def from_record(cls, order: OrderRecord) -> "OrderResponse":
        return cls(
            id=order.id,
            timestamp=order.timestamp,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            total_amount=order.total_amount,
            status=order.status,
            items=[LineItemResponse.model_validate(item) for item in order.line_items],
        )


class OrderDetailResponse(BaseModel):
    """Single order response wrapper."""

    data: OrderResponse


class OrderStatusResponse(BaseModel):
    """Result of a status change."""

    id: str
    status: str
    email_sent: bool
