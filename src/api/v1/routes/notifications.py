"""Notification feed API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_aggregator
from api.v1.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.notification_aggregator import NotificationAggregator

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_notifications(
    request: Request,
    user: CurrentUser,
    aggregator: NotificationAggregator = Depends(get_aggregator),
) -> NotificationListResponse:
    """The admin notification feed, newest first, with the unread count."""
    return NotificationListResponse(
        data=[NotificationResponse.from_entity(n) for n in aggregator.notifications],
        meta={"unread_count": aggregator.unread_count()},
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_unread_count(
    request: Request,
    user: CurrentUser,
    aggregator: NotificationAggregator = Depends(get_aggregator),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=aggregator.unread_count())


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def mark_all_read(
    request: Request,
    user: CurrentUser,
    aggregator: NotificationAggregator = Depends(get_aggregator),
) -> MarkAllReadResponse:
    """Clear every unread flag. ``changed`` is false when nothing was unread."""
    return MarkAllReadResponse(changed=await aggregator.mark_all_read())


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Dismiss a notification",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def dismiss_notification(
    request: Request,
    notification_id: str,
    user: CurrentUser,
    aggregator: NotificationAggregator = Depends(get_aggregator),
) -> None:
    """Remove one notification. Unknown ids are ignored."""
    await aggregator.dismiss(notification_id)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear all notifications",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def clear_notifications(
    request: Request,
    user: CurrentUser,
    aggregator: NotificationAggregator = Depends(get_aggregator),
) -> None:
    await aggregator.clear_all()
