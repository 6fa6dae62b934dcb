"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SHOP_TIMEZONE"] = "UTC"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from api.runtime import DashboardRuntime
from core.config import settings
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.session import create_session_factory


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite database file per test with all tables created.

    Live query workers read on their own connections while requests write,
    so each session needs a connection of its own.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def mailer() -> AsyncMock:
    """SMTP transport stand-in."""
    mailer = AsyncMock()
    mailer.send.return_value = "250 2.0.0 OK queued"
    return mailer


@pytest.fixture
def order_mailer() -> AsyncMock:
    """Status email relay stand-in."""
    order_mailer = AsyncMock()
    order_mailer.send_order_status.return_value = True
    return order_mailer


@pytest.fixture
async def runtime(
    session_factory: async_sessionmaker[AsyncSession],
    mailer: AsyncMock,
    order_mailer: AsyncMock,
) -> AsyncGenerator[DashboardRuntime, None]:
    """A started runtime on the test database."""
    runtime = DashboardRuntime(settings, session_factory, mailer=mailer, order_mailer=order_mailer)
    await runtime.start()
    await runtime.documents.wait_idle()
    yield runtime
    await runtime.stop()


@pytest.fixture
def test_user() -> TokenUser:
    return TokenUser(
        id=str(uuid4()),
        email="admin@flourish.example",
        display_name="Shop Admin",
    )


@pytest.fixture
def auth_headers(runtime: DashboardRuntime, test_user: TokenUser) -> dict[str, str]:
    """Authorization headers signed by the runtime's auth provider."""
    return {"Authorization": f"Bearer {runtime.auth_provider.create_token(test_user)}"}


@pytest.fixture
async def client(runtime: DashboardRuntime) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the test runtime.

    ASGITransport does not run the lifespan; the ``runtime`` fixture starts
    and stops the runtime instead.
    """
    from main import create_app

    app = create_app(runtime)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
