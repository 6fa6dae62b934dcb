"""Typed views over the schemaless storefront documents.

The stored documents carry no enforced schema. Each record type names the
fields the dashboard consumes; required fields are the document id, every
other field is optional and parsed leniently.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from core.clock import parse_timestamp
from domain.entities.document import Document


class OrderStatus:
    """Order status values."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    ALL = (PENDING, PROCESSING, DELIVERED, CANCELLED)


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _number(value: Any, default: float = 0.0) -> float:
    """Lenient float parse; non-numeric and non-finite values yield ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


@dataclass(frozen=True, slots=True)
class LineItem:
    """One product line of an order."""

    name: str
    quantity: int = 1
    price: float | None = None

    @classmethod
    def from_data(cls, data: Any) -> "LineItem | None":
        """Parse a product entry; entries without a name are dropped."""
        if not isinstance(data, dict):
            return None
        name = _str_or_none(data.get("name"))
        if not name:
            return None
        quantity = int(_number(data.get("quantity"), 0)) or 1
        raw_price = data.get("price")
        price = _number(raw_price) if raw_price not in (None, "") else None
        return cls(name=name, quantity=quantity, price=price or None)

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "quantity": self.quantity}
        if self.price is not None:
            data["price"] = self.price
        return data


@dataclass(frozen=True, slots=True)
class OrderRecord:
    """An order placed from the storefront."""

    id: str
    timestamp: datetime | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    user_id: str | None = None
    total_amount: float = 0.0
    status: str = OrderStatus.PENDING
    product: LineItem | None = None
    products: list[LineItem] = field(default_factory=list)

    @property
    def line_items(self) -> list[LineItem]:
        """The single ``product`` (if any) followed by the ``products`` list."""
        items = [self.product] if self.product else []
        items.extend(self.products)
        return items

    @classmethod
    def from_document(cls, document: Document) -> "OrderRecord":
        data = document.data
        products: list[LineItem] = []
        raw_products = data.get("products")
        if isinstance(raw_products, list):
            for raw in raw_products:
                item = LineItem.from_data(raw)
                if item is not None:
                    products.append(item)
        return cls(
            id=document.id,
            timestamp=parse_timestamp(data.get("timestamp")),
            customer_name=_str_or_none(data.get("customerName")),
            customer_email=_str_or_none(data.get("customerEmail")),
            customer_phone=_str_or_none(data.get("customerPhone")),
            user_id=_str_or_none(data.get("userId")),
            total_amount=_number(data.get("totalAmount")),
            status=_str_or_none(data.get("status")) or OrderStatus.PENDING,
            product=LineItem.from_data(data.get("product")),
            products=products,
        )


@dataclass(frozen=True, slots=True)
class ChatThreadRecord:
    """A customer chat thread, summarized by its last message."""

    id: str
    timestamp: datetime | None = None
    user_name: str | None = None
    last_message: str | None = None
    is_read: bool = False

    @classmethod
    def from_document(cls, document: Document) -> "ChatThreadRecord":
        data = document.data
        return cls(
            id=document.id,
            timestamp=parse_timestamp(data.get("timestamp")),
            user_name=_str_or_none(data.get("userName")),
            last_message=_str_or_none(data.get("lastMessage")),
            is_read=data.get("isRead") is True,
        )


@dataclass(frozen=True, slots=True)
class FeedbackRecord:
    """A customer review."""

    id: str
    created_at: datetime | None = None
    customer_name: str | None = None
    rating: int | None = None
    comment: str | None = None

    @classmethod
    def from_document(cls, document: Document) -> "FeedbackRecord":
        data = document.data
        rating = _number(data.get("rating"), math.nan)
        return cls(
            id=document.id,
            created_at=parse_timestamp(data.get("createdAt")),
            customer_name=_str_or_none(data.get("customerName")),
            rating=int(rating) if math.isfinite(rating) else None,
            comment=_str_or_none(data.get("comment")),
        )
