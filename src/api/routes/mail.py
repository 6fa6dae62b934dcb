"""Order status email relay.

Sends the status email for an order and writes the status back into the
order document. The storefront and the admin dashboard both call it, so the
response shape is ``{message, info}`` / ``{error, details}`` rather than the
API error envelope.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse, PlainTextResponse

from api.runtime import DashboardRuntime
from api.v1.dependencies import get_runtime
from api.v1.schemas.mail import REQUIRED_ORDER_EMAIL_FIELDS, OrderEmailRequest
from core.rate_limit import WRITE_LIMIT, limiter
from infrastructure.mail.templates import render_order_status_email

logger = structlog.get_logger()

router = APIRouter(tags=["mail"])


def _has_required_fields(payload: Any) -> bool:
    return isinstance(payload, dict) and all(
        isinstance(payload.get(field), str) and payload.get(field)
        for field in REQUIRED_ORDER_EMAIL_FIELDS
    )


@router.get("/", response_class=PlainTextResponse, summary="Relay liveness")
async def relay_status() -> str:
    return "Email server is running."


@router.post(
    "/send-order-email",
    summary="Send an order status email",
    responses={
        200: {"description": "Email sent and order updated"},
        400: {"description": "A required field is missing or empty"},
        500: {"description": "Sending or updating failed"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def send_order_email(
    request: Request,
    runtime: DashboardRuntime = Depends(get_runtime),
) -> ORJSONResponse:
    logger.info("order_email_requested")
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not _has_required_fields(payload):
        return ORJSONResponse(
            status_code=400,
            content={"error": "Missing required fields for order email"},
        )

    body = OrderEmailRequest.model_validate(payload)
    subject, html = render_order_status_email(
        customer_name=body.customerName,
        order_id=body.orderId,
        status=body.status,
        product_name=body.productName,
    )

    try:
        info = await runtime.mailer.send(body.customerEmail, subject, html)
        await runtime.orders.apply_status(body.orderId, body.status)
    except Exception as exc:
        logger.exception("order_email_failed", order_id=body.orderId)
        return ORJSONResponse(
            status_code=500,
            content={
                "error": "Failed to send order email or update the order",
                "details": str(exc),
            },
        )

    logger.info("order_email_sent", order_id=body.orderId, status=body.status)
    return ORJSONResponse(
        status_code=200,
        content={
            "message": "Order email sent and database updated successfully",
            "info": info,
        },
    )
