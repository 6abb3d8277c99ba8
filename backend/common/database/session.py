"""
Async database engine and session management.

This module builds the async SQLAlchemy engine and session factory for a service.
Engines are created explicitly by the owning application (typically in its FastAPI
lifespan) and handed to repositories through their constructors; nothing here is
cached at module level.

Key Features:
    - Bounded connection pooling configured from service settings
    - Pre-ping enabled for connection validation
    - Async context manager with commit/rollback/close handling
    - URL normalization for Heroku-style ``postgres://`` URLs

Usage:
    ```python
    from common.database import create_async_engine_from_settings, create_session_maker

    engine = create_async_engine_from_settings(settings)
    session_maker = create_session_maker(engine)

    async with session_scope(session_maker) as session:
        company = await session.get(Company, "co_1")

    await engine.dispose()
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import os

from loguru import logger
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from common.config import BaseServiceSettings


def create_sqlalchemy_url(database_url: str | None = None) -> URL:
    """
    Create an async SQLAlchemy URL.

    Args:
        database_url: Explicit database URL. ``postgres://`` and ``postgresql://``
            schemes are rewritten to the asyncpg driver. When empty, the URL is
            assembled from the POSTGRES_* environment variables.

    Returns:
        SQLAlchemy URL object.

    Raises:
        ValueError: If no URL is given and POSTGRES_DATABASE is not set.

    Environment Variables:
        - POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST
        - POSTGRES_PORT (default: 5432)
        - POSTGRES_DATABASE
    """
    if database_url:
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif database_url.startswith("postgresql://"):
            database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return make_url(database_url)

    database_name = os.getenv("POSTGRES_DATABASE")
    if not database_name:
        msg = "DATABASE_URL or POSTGRES_DATABASE must be set"
        raise ValueError(msg)

    return URL.create(
        drivername="postgresql+asyncpg",
        username=os.getenv("POSTGRES_USER"),
        password=os.getenv("POSTGRES_PASSWORD"),
        host=os.getenv("POSTGRES_HOST"),
        port=int(os.getenv("POSTGRES_PORT", "5432")),
        database=database_name,
    )


def create_async_engine_from_settings(settings: BaseServiceSettings) -> AsyncEngine:
    """
    Create an async engine with a bounded connection pool.

    Bound parameters are hidden from error messages and echo output. An in-memory
    SQLite URL (used by tests) gets a single shared connection instead of a pool.

    Args:
        settings: Service settings providing DATABASE_URL and the pool parameters
            (DATABASE_POOL_SIZE, DATABASE_MAX_OVERFLOW, DATABASE_POOL_TIMEOUT,
            DATABASE_POOL_RECYCLE).

    Returns:
        SQLAlchemy AsyncEngine. The caller owns it and must dispose it.
    """
    url = create_sqlalchemy_url(settings.DATABASE_URL)
    echo = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        engine = create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            hide_parameters=True,
            echo=echo,
        )
        logger.info(f"Created in-memory SQLite engine for {settings.SERVICE_NAME}")
        return engine

    engine = create_async_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
        hide_parameters=True,
        echo=echo,
    )

    logger.info(
        f"Created async database engine for {settings.SERVICE_NAME} "
        f"(driver={url.drivername}, pool_size={settings.DATABASE_POOL_SIZE}, "
        f"max_overflow={settings.DATABASE_MAX_OVERFLOW})"
    )

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,  # Keep objects usable after commit
    )


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Async context manager for database sessions with automatic cleanup.

    Yields:
        AsyncSession ready for database operations.

    Note:
        - Sessions commit on successful exit
        - Sessions roll back on exceptions, which are re-raised
        - Sessions are always closed when exiting the context
    """
    session = session_maker()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Async database session error: {e.__class__.__name__}")
        raise
    finally:
        await session.close()
