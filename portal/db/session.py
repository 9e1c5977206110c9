"""
db/session.py
-------------
Async engine, session factory and the per-request unit of work.

Transaction boundary:
  Services only flush() and refresh(). The caller that opened the session
  decides when to commit: get_db() commits once the route handler returns
  and rolls back if anything raised, so every write a request makes lands
  together or not at all.

Engine:
  asyncpg in production with a bounded pool (10 + 20 overflow) and
  pre-ping. SQLite URLs are used for local runs and tests and keep the
  dialect's own pool.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from portal.core.config import settings


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    options = {"echo": echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
    return create_async_engine(url, **options)


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> AsyncIterator[AsyncSession]:
    """Commit on clean exit, roll back on any exception."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency: one session per request.

    Usage:
        @router.get("/example")
        async def handler(db: Annotated[AsyncSession, Depends(get_db)]):
            ...
    """
    async with session_scope() as session:
        yield session
