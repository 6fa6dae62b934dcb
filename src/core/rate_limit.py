"""Rate limiting configuration using slowapi."""

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import settings
from core.exceptions import ErrorCode

# Dashboard reads poll frequently; writes come from the storefront and admin actions.
READ_LIMIT = "60/minute"
WRITE_LIMIT = "20/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Render slowapi's rejection in the API error shape."""
    detail = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    return ORJSONResponse(
        status_code=429,
        content={
            "error_code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
            "message": f"Rate limit exceeded: {detail}",
            "details": {"retry_after": str(detail)},
        },
    )
