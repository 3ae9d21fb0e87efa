"""Async engine and session handling for the deployment ledger store."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    async_sessionmaker,
    AsyncEngine,
    AsyncSession,
    create_async_engine,
)

from provisioner.config import DatabaseSettings
from provisioner.infrastructure.persistence.models import Base


logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Owns the pooled engine; every repository call opens one short session."""

    def __init__(self, settings: DatabaseSettings) -> None:
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    @property
    def initialized(self) -> bool:
        return self._sessions is not None

    async def initialize(self, create_schema: bool = False) -> None:
        """Create the engine; with ``create_schema`` also create missing tables."""
        self._engine = create_async_engine(
            self._settings.async_url,
            pool_size=self._settings.pool_size,
            max_overflow=self._settings.max_overflow,
            pool_timeout=self._settings.pool_timeout,
            pool_pre_ping=True,
        )
        self._sessions = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        if create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info(
            "database_initialized",
            host=self._settings.host,
            database=self._settings.name,
            schema_created=create_schema,
        )

    async def ping(self) -> bool:
        """Round-trip ``SELECT 1``; used by the readiness check."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("database_ping_failed", error=str(e))
            return False
        return True

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on clean exit and rolled back on any error."""
        if self._sessions is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
