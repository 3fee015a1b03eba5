"""Async engine and session factory for the shared records table."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from orderdesk.core.config import DATABASE_ECHO, DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str = DATABASE_URL) -> AsyncEngine:
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return create_async_engine(url, echo=DATABASE_ECHO, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
SessionLocal = build_session_factory(engine)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session, commit on success and roll back on error.

    Usage:
        async with session_scope(SessionLocal) as session:
            ...
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create the records table when it does not exist yet."""
    import orderdesk.models  # noqa: F401  registra os models no metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Records table ready")
