"""
Database integration module.

Features:
- Async SQLAlchemy engine (MySQL via aiomysql/asyncmy, or SQLite via aiosqlite)
- Bounded connection pool sized from settings
- FastAPI dependency for per-request session access
- Lifecycle management for FastAPI apps

Limitations:
- Only async SQLAlchemy is supported (no sync engine/session)
- No ORM models; queries are raw SQL compiled by ``bibliocore.api.binding``
- No migration helpers
"""

from bibliocore.db.engine import build_engine, init_db, shutdown_db
from bibliocore.db.manager import get_db, setup_db

__all__ = [
    "build_engine",
    "init_db",
    "shutdown_db",
    "setup_db",
    "get_db",
]
