# =============================================================================
# Database Engine & Session Management
# =============================================================================
#
# DESIGN DECISION: Async SQLAlchemy engine. FastAPI is async, so every store
# call is awaited and never blocks the event loop.
#
# DESIGN DECISION: The engine is built inside the application lifespan
# (app/main.py) and kept on `app.state`, not at import time. Importing the
# package then never needs a database driver, and tests can point a fresh
# app at an in-memory SQLite database.
#
# SESSION LIFECYCLE:
# 1. Request arrives
# 2. `get_async_session` opens a session from app.state.session_factory
# 3. Route handler runs its store calls on that session
# 4. Session commits on exit; on exception the transaction is rolled back
# 5. If the client goes away the request task is cancelled and the session
#    is closed without committing. No operation here spans several commits.
# =============================================================================

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.db.models import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for `settings.database_url`.

    SQLite in-memory databases live inside a single connection, so they get
    a StaticPool; server databases get a sized connection pool.
    """
    url = make_url(settings.database_url)

    if url.get_backend_name() == "sqlite":
        kwargs = {}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=settings.database_echo, **kwargs)

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    expire_on_commit=False keeps loaded attributes readable after commit;
    touching an expired attribute would trigger lazy IO outside the session.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Usage in route handlers:
        @router.get("/items")
        async def list_items(session: AsyncSession = Depends(get_async_session)):
            ...
    """
    factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
