"""Async database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict[str, Any]:
    """Pool options; SQLite (local dev) does not take a sized pool."""
    if url.startswith("sqlite"):
        return {"echo": settings.app_debug}
    return {
        "pool_size": settings.database_pool_size,
        "pool_pre_ping": True,
        "echo": settings.app_debug,
    }


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides an async database session.

    Commits when the request handler returns normally, rolls back on any
    exception (including HTTPException raised by the route).
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """Standalone transactional session for background tasks and scripts.

    Request sessions are closed before FastAPI background tasks run, so work
    scheduled after the response needs its own session.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
