"""Chat thread API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_message_service
from api.v1.schemas.chat import ChatMessageCreate, ChatThreadResponse
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.message_service import MessageService

router = APIRouter(prefix="/chats", tags=["chats"])


@router.post(
    "/{thread_id}/messages",
    response_model=ChatThreadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a customer message",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def post_message(
    request: Request,
    thread_id: str,
    body: ChatMessageCreate,
    user: CurrentUser,
    service: MessageService = Depends(get_message_service),
) -> ChatThreadResponse:
    thread = await service.post_customer_message(
        thread_id=thread_id,
        user_id=user.id,
        user_name=body.user_name or user.display_name,
        text=body.text,
    )
    return ChatThreadResponse.from_record(thread)


@router.post(
    "/{thread_id}/read",
    response_model=ChatThreadResponse,
    summary="Mark a thread as read",
    responses={404: {"description": "Thread not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def mark_thread_read(
    request: Request,
    thread_id: str,
    user: CurrentUser,
    service: MessageService = Depends(get_message_service),
) -> ChatThreadResponse:
    return ChatThreadResponse.from_record(await service.mark_read(thread_id))
