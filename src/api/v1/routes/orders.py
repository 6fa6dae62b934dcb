"""Order API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_order_service
from api.v1.schemas.order import (
    OrderCreate,
    OrderDetailResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
)
from core.rate_limit import WRITE_LIMIT, limiter
from domain.entities.records import LineItem
from domain.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def place_order(
    request: Request,
    body: OrderCreate,
    user: CurrentUser,
    service: OrderService = Depends(get_order_service),
) -> OrderDetailResponse:
    """Place a pending order for the caller."""
    order = await service.place_order(
        user_id=user.id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        items=[LineItem(name=i.name, quantity=i.quantity, price=i.price) for i in body.items],
        customer_phone=body.customer_phone,
        total_amount=body.total_amount,
    )
    return OrderDetailResponse(data=OrderResponse.from_record(order))


@router.patch(
    "/{order_id}/status",
    response_model=OrderStatusResponse,
    summary="Update an order's status",
    responses={
        400: {"description": "Unknown status"},
        404: {"description": "Order not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_order_status(
    request: Request,
    order_id: str,
    body: OrderStatusUpdate,
    user: CurrentUser,
    service: OrderService = Depends(get_order_service),
) -> OrderStatusResponse:
    """Change the status and email the customer when a mail relay is configured."""
    order, email_sent = await service.update_status(order_id, body.status)
    return OrderStatusResponse(id=order.id, status=order.status, email_sent=email_sent)
