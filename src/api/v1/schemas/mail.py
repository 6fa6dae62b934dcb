"""Pydantic schemas for the order email relay."""

from pydantic import BaseModel

REQUIRED_ORDER_EMAIL_FIELDS = ("customerEmail", "customerName", "orderId", "status", "productName")


class OrderEmailRequest(BaseModel):
    """Body of ``POST /send-order-email``. Every field is required and non-empty."""

    customerEmail: str
    customerName: str
    orderId: str
    status: str
    productName: str


class OrderEmailResponse(BaseModel):
    message: str
    info: str
