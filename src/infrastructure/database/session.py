"""Database engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings, settings


def create_engine(config: Settings) -> AsyncEngine:
    """Async engine for the configured database.

    Transaction-mode poolers (Supabase's Supavisor and the like) break
    asyncpg's prepared statement cache, so it is off behind one.
    """
    connect_args: dict = {}
    if "pooler." in config.database_url:
        connect_args["statement_cache_size"] = 0
    return create_async_engine(
        config.async_database_url,
        echo=config.debug,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine(settings)
async_session_factory = create_session_factory(engine)
