"""Dashboard session API routes.

The dashboard's live queries run under one identity at a time. Signing in
replaces it with the caller's; signing out falls back to an anonymous one.
"""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import BearerToken, CurrentUser
from api.runtime import DashboardRuntime
from api.v1.dependencies import get_runtime
from api.v1.schemas.session import SessionResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter

router = APIRouter(prefix="/session", tags=["session"])


def _session_response(runtime: DashboardRuntime) -> SessionResponse:
    session = runtime.gate.session
    identity = session.identity if session else None
    return SessionResponse(
        uid=identity.uid if identity else None,
        email=identity.email if identity else None,
        display_name=identity.display_name if identity else None,
        is_anonymous=identity.is_anonymous if identity else False,
        started_at=runtime.aggregator.session_started_at,
        subscriptions=len(runtime.gate.subscriptions),
    )


@router.get("", response_model=SessionResponse, summary="Current dashboard session")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_session(
    request: Request,
    user: CurrentUser,
    runtime: DashboardRuntime = Depends(get_runtime),
) -> SessionResponse:
    return _session_response(runtime)


@router.post("", response_model=SessionResponse, summary="Run the dashboard as the caller")
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def sign_in(
    request: Request,
    token: BearerToken,
    runtime: DashboardRuntime = Depends(get_runtime),
) -> SessionResponse:
    await runtime.identity.sign_in_with_token(token)
    return _session_response(runtime)


@router.delete("", response_model=SessionResponse, summary="Sign the dashboard out")
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def sign_out(
    request: Request,
    user: CurrentUser,
    runtime: DashboardRuntime = Depends(get_runtime),
) -> SessionResponse:
    await runtime.identity.sign_out()
    return _session_response(runtime)
