"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.routes.mail import router as mail_router
from api.runtime import DashboardRuntime
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the dashboard runtime for the lifetime of the app."""
    runtime: DashboardRuntime = app.state.runtime
    await runtime.start()
    try:
        yield
    finally:
        await runtime.stop()


def _default_runtime() -> DashboardRuntime:
    from infrastructure.database.session import async_session_factory

    return DashboardRuntime(settings, async_session_factory)


def create_app(runtime: DashboardRuntime | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        runtime: Prebuilt runtime; defaults to one bound to the configured database.
    """
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Flourish Admin API\n\n"
            "Back office of the Flourish flower shop: a live notification feed "
            "for new orders, messages and reviews, customer and sales rollups "
            "over the order stream, and the order status email relay.\n\n"
            "### Authentication\n"
            "Endpoints under `/api/v1` require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 60 requests/minute\n"
            "- POST/PATCH/DELETE: 20 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {"name": "health", "description": "Health check endpoints"},
            {"name": "mail", "description": "Order status email relay"},
            {"name": "notifications", "description": "Admin notification feed"},
            {"name": "customers", "description": "Customers derived from orders"},
            {"name": "dashboard", "description": "Top sellers and sales by hour"},
            {"name": "orders", "description": "Order placement and status"},
            {"name": "chats", "description": "Customer chat threads"},
            {"name": "feedback", "description": "Customer reviews"},
            {"name": "session", "description": "Identity the dashboard runs under"},
        ],
    )
    app.state.runtime = runtime or _default_runtime()

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(mail_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
