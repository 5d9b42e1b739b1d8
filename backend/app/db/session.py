"""Database connection lifecycle and session management."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import Settings
from app.core.security.masking import mask_url
from app.db.base import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and session factory for one application instance.

    Constructed by ``create_application`` and kept on ``app.state.database``.
    ``connect`` must run before the first request, ``disconnect`` after the
    last one has finished.
    """

    def __init__(self, settings: Settings) -> None:
        self.url = str(settings.database_url)
        self.echo = settings.debug
        self.pool_size = settings.database_pool_size
        self.max_overflow = settings.database_max_overflow
        self.create_tables = settings.database_create_tables
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    async def connect(self) -> None:
        """Create the engine and, if configured, the schema."""
        if self.engine is not None:
            return
        logger.info("Connecting to database %s", mask_url(self.url))
        engine_kw: dict = {"echo": self.echo, "pool_pre_ping": True}
        if not self.url.startswith("sqlite"):
            engine_kw.update(pool_size=self.pool_size, max_overflow=self.max_overflow)
        self.engine = create_async_engine(self.url, **engine_kw)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        if self.create_tables:
            # Importing the models registers their tables on Base.metadata
            import app.models  # noqa: F401

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        """Dispose of the connection pool."""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Database connection closed")

    async def ping(self) -> float:
        """Run ``SELECT 1`` and return the round trip in milliseconds."""
        if self.engine is None:
            raise RuntimeError("Database is not connected")
        start = time.monotonic()
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return round((time.monotonic() - start) * 1000, 2)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, rolling back if the caller raises."""
        if self.session_factory is None:
            raise RuntimeError("Database is not connected")
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a request-scoped database session."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
