"""
Unit tests for the db module.

Covers:
- Engine construction from settings (pool options, in-memory SQLite)
- init_db / shutdown_db lifecycle of the module-level state
- get_db session dependency (commit-free reads, rollback, error mapping)
- Lifespan wiring through setup_db
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

import bibliocore.db.engine as db_engine
from bibliocore.config import BaseAppSettings, TestingSettings
from bibliocore.db import build_engine, get_db, init_db, setup_db, shutdown_db
from bibliocore.errors import DBError, NotFoundError


@pytest.fixture
def settings():
    return TestingSettings()


@pytest.fixture
def fake_session_factory(monkeypatch):
    session = AsyncMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    monkeypatch.setattr(db_engine, "SessionLocal", MagicMock(return_value=context))
    return session


@pytest.mark.asyncio
async def test_build_engine_in_memory_uses_static_pool(settings):
    engine = build_engine(settings)
    try:
        assert isinstance(engine.pool, StaticPool)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_build_engine_mysql_pool_options():
    settings = BaseAppSettings(DB_POOL_SIZE=4, DB_POOL_TIMEOUT=2.5)
    engine = build_engine(settings)
    try:
        assert engine.pool.size() == 4
        assert engine.pool._max_overflow == 0
        assert engine.pool._timeout == 2.5
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_init_and_shutdown_db(settings):
    await init_db(settings, MagicMock())
    assert db_engine.engine is not None
    assert db_engine.SessionLocal is not None
    await shutdown_db(MagicMock())
    assert db_engine.engine is None
    assert db_engine.SessionLocal is None


@pytest.mark.asyncio
async def test_get_db_without_init(monkeypatch):
    monkeypatch.setattr(db_engine, "SessionLocal", None)
    gen = get_db()
    with pytest.raises(DBError) as exc:
        await gen.__anext__()
    assert exc.value.message == "database not initialized"


@pytest.mark.asyncio
async def test_get_db_yields_session(fake_session_factory):
    gen = get_db()
    session = await gen.__anext__()
    assert session is fake_session_factory
    with pytest.raises(StopAsyncIteration):
        await gen.__anext__()
    fake_session_factory.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_db_maps_sqlalchemy_errors(fake_session_factory):
    gen = get_db()
    await gen.__anext__()
    with pytest.raises(DBError):
        await gen.athrow(SQLAlchemyError("boom"))
    fake_session_factory.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_db_propagates_app_errors(fake_session_factory):
    gen = get_db()
    await gen.__anext__()
    with pytest.raises(NotFoundError):
        await gen.athrow(NotFoundError())
    fake_session_factory.rollback.assert_awaited_once()


def test_setup_db_lifespan(settings):
    app = FastAPI()
    setup_db(app, settings, MagicMock())
    assert db_engine.SessionLocal is None
    with TestClient(app):
        assert db_engine.SessionLocal is not None
    assert db_engine.SessionLocal is None
