"""
MindWell Backend — Database Engine & Session Management
=======================================================

What:  Async SQLAlchemy engine factory, session factory and declarative Base.
How:   `build_engine()` creates an async engine with connection pooling;
       `build_session_factory()` wraps it in an `async_sessionmaker`.
Who:   Used by SQLAlchemyStore (mindwell.repositories.sql), Alembic and the
       health check.
When:  Only when STORAGE_BACKEND=database; the in-memory store never opens
       a connection.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local experiments) skip the pool arguments because
    aiosqlite manages its own single-connection pool.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from mindwell.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by Alembic and by `SQLAlchemyStore.initialize(create_schema=True)`.
    """
    pass


def build_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async engine for `database_url` (defaults to settings.database_url).

    Echoes SQL when LOG_LEVEL=DEBUG.
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.log_level == "DEBUG")

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps ORM attributes readable after the
    transaction closes, which the store relies on when converting rows
    into records.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown via `SQLAlchemyStore.close()`.
    """
    await engine.dispose()
