"""Async SQLAlchemy engine + session factory.

Supports both SQLite (dev/tests) and PostgreSQL (prod) with appropriate pool settings.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.settings import settings


def normalize_url(url: str) -> str:
    """Force an async driver onto plain postgresql:// URLs."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str) -> AsyncEngine:
    url = normalize_url(url)
    engine_kwargs: dict = {"echo": False}

    if not url.startswith("sqlite"):
        # The listing query is a single round trip, keep the pool warm for it
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_timeout": 30,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        })

    return create_async_engine(url, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI — yields an async session."""
    async with async_session() as session:
        yield session
