"""Async engine and session factory for the file and submission records.

Tests point the app at ``TEST_DATABASE_URL`` by exporting ``TESTING=true``.
SQLite (tests, local development) gets no connection pool options.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings


def resolve_database_url() -> str:
    if os.getenv("TESTING") == "true":
        url = os.getenv("TEST_DATABASE_URL") or settings.test_database_url
    else:
        url = settings.database_url

    url = (url or "").strip()
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not configured. Set it in the environment or .env file "
            "(e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
        )
    return url


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """Create an engine with pool settings suited to the backend."""
    options: dict[str, Any] = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )
    options.update(overrides)
    return create_async_engine(url, **options)


DB_URL = resolve_database_url()

engine = build_engine(DB_URL)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, Any]:
    """Yield one session per request."""
    async with AsyncSessionLocal() as session:
        yield session
