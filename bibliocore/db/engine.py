"""
Database engine and session factory.

The engine is module-level state created once per process by ``init_db`` and
disposed by ``shutdown_db``; sessions are created per request from
``SessionLocal``.
"""

import logging
from typing import Optional

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from bibliocore.config.base import BaseAppSettings
from bibliocore.logging import ensure_logger

# Module-level engine and session factory
engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(settings: BaseAppSettings) -> AsyncEngine:
    """
    Create the async engine described by the settings.

    Server databases get a bounded pool (``DB_POOL_SIZE`` connections, no
    overflow, ``DB_POOL_TIMEOUT`` seconds to acquire one). SQLite uses its
    driver's default pool, except in-memory databases which share a single
    connection so every session sees the same data.

    Args:
        settings: Application settings

    Returns:
        AsyncEngine instance
    """
    url = make_url(settings.DATABASE_URL)
    engine_kwargs = {"echo": settings.DB_ECHO}

    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )

    return create_async_engine(settings.DATABASE_URL, **engine_kwargs)


async def init_db(
    settings: BaseAppSettings, logger: Optional[logging.Logger] = None
) -> None:
    """
    Initialize the database engine and session factory.

    Args:
        settings: Application settings
        logger: Optional logger for database operations
    """
    global engine, SessionLocal

    log = ensure_logger(logger, __name__, settings)

    url = make_url(settings.DATABASE_URL)
    log.debug(f"Creating database engine for {url.render_as_string(hide_password=True)}")
    engine = build_engine(settings)
    SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)
    log.debug("Database engine and session factory initialized")


async def shutdown_db(logger: Optional[logging.Logger] = None) -> None:
    """
    Dispose of the database engine.

    Args:
        logger: Optional logger for database operations
    """
    global engine, SessionLocal

    log = ensure_logger(logger, __name__)

    if engine:
        log.debug("Disposing database engine")
        await engine.dispose()
        log.debug("Database engine disposed")
    engine = None
    SessionLocal = None
