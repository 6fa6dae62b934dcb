"""Health check endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text

from api.runtime import DashboardRuntime
from api.v1.dependencies import get_runtime
from core.clock import utc_now
from core.config import settings

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    subscriptions: int | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies. Fast and lightweight.
    """
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=utc_now().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    runtime: DashboardRuntime = Depends(get_runtime),
) -> HealthResponse:
    """
    Detailed health check including database connectivity and the number of
    open live queries.
    """
    try:
        async with runtime.session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {e}"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        version=API_VERSION,
        timestamp=utc_now().isoformat(),
        environment=settings.app_env,
        database=db_status,
        subscriptions=runtime.documents.subscription_count(),
    )
