"""Feedback API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_feedback_service
from api.v1.schemas.feedback import FeedbackCreate, FeedbackResponse
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.feedback_service import FeedbackService

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post(
    "",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def submit_feedback(
    request: Request,
    body: FeedbackCreate,
    user: CurrentUser,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    feedback = await service.submit(
        user_id=user.id,
        customer_name=body.customer_name or user.display_name,
        rating=body.rating,
        comment=body.comment,
    )
    return FeedbackResponse.model_validate(feedback)
