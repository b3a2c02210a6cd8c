from unittest.mock import AsyncMock, MagicMock

import pytest

from bibliocore.api import QueryExecutor


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    # Settings must come from the test, not the developer's shell
    for name in (
        "APP_ENV",
        "APP_NAME",
        "DEBUG",
        "DATABASE_URL",
        "DB_HOST",
        "DB_PORT",
        "DB_USER",
        "DB_PASSWORD",
        "DB_NAME",
        "LOG_LEVEL",
        "LOG_JSON_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


def _make_result(rows=None, scalar=None, rowcount=None, lastrowid=None):
    rows = rows or []
    mappings = MagicMock()
    mappings.all.return_value = rows
    mappings.first.return_value = rows[0] if rows else None
    result = MagicMock()
    result.mappings.return_value = mappings
    result.scalar.return_value = scalar
    result.rowcount = rowcount
    result.lastrowid = lastrowid
    return result


@pytest.fixture
def make_result():
    """Factory for mock SQLAlchemy results returning ``rows`` (list of dicts)."""
    return _make_result


@pytest.fixture
def dummy_session():
    """Reusable async session mock for DB operations."""
    return AsyncMock()


@pytest.fixture
def executor(dummy_session):
    return QueryExecutor(dummy_session)
