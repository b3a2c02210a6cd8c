"""
Database lifecycle and session dependency.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import bibliocore.db.engine as db_engine
from bibliocore.config.base import BaseAppSettings
from bibliocore.db.engine import init_db, shutdown_db
from bibliocore.errors.exceptions import DBError
from bibliocore.logging import ensure_logger


def setup_db(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Configure database lifecycle for a FastAPI application.

    - On startup: initialize AsyncEngine and sessionmaker
    - On shutdown: dispose engine

    The application's existing lifespan, if any, runs inside the database one.
    """
    log = ensure_logger(logger, __name__, settings)
    inner_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        await init_db(settings, log)
        log.info("Database engine initialized")
        try:
            async with inner_lifespan(app_) as state:
                yield state
        finally:
            await shutdown_db(log)
            log.info("Database engine disposed")

    app.router.lifespan_context = lifespan


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Storage failures surfacing through the session are rolled back and
    re-raised as ``DBError``; any other exception is rolled back and
    propagated unchanged.
    """
    log = ensure_logger(None, __name__)

    if db_engine.SessionLocal is None:
        raise DBError(message="database not initialized")

    async with db_engine.SessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            log.error(f"Database session error: {e}")
            raise DBError() from e
        except Exception:
            await session.rollback()
            raise
