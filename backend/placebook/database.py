"""
PlaceBook Backend: Database Handle and Session Management
=========================================================

What:  Async SQLAlchemy engine + session factory wrapped in an explicit
       `Database` object, plus the FastAPI session dependency.
How:   The application factory constructs one `Database`, stores it on
       ``app.state.database`` and disposes it at shutdown. Each request gets
       its own `AsyncSession` through `get_db_session`, which rolls back on
       error and always closes the session.
Who:   Route handlers (via Depends), the health probe, Alembic and tests.

Connection Pooling Strategy:
    pool_size=20 / max_overflow=10 for PostgreSQL (at most 30 connections).
    SQLite URLs (tests, local experiments) use SQLAlchemy's default pool.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from placebook.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `Database.create_all`
    and Alembic's autogenerate.
    """
    pass


class Database:
    """
    Owns the engine and session factory for one database URL.

    Lifecycle:
        1. Constructed by create_app() (no connection is opened yet)
        2. Sessions handed out per request by get_db_session()
        3. dispose() closes every pooled connection at shutdown
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        engine_options = {
            "echo": settings.log_level == "DEBUG" if echo is None else echo,
        }
        if not self.url.startswith("sqlite"):
            engine_options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_options)

        # expire_on_commit=False: response shaping reads attributes after
        # commit without issuing another query
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide one session; roll back on any error and always close it.

        Services commit their own writes (one transaction per multi-row
        write), so nothing is committed here.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create every table known to Base.metadata (tests and local dev)."""
        # Registers the models on Base.metadata
        from placebook import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Execute SELECT 1; used by the health probe."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/users")
        async def get_users(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
