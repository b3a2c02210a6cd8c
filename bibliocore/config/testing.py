"""
Testing environment specific settings.

This module contains settings that are specific to the testing environment,
such as the in-memory database used by the test suite.
"""

from typing import Optional

from .base import BaseAppSettings


class TestingSettings(BaseAppSettings):
    """
    Settings class for testing environment.

    Uses an in-memory SQLite database (aiosqlite driver) and enables debug mode.

    Attributes:
        DEBUG: Set to True for detailed test output
        DATABASE_URL: In-memory SQLite connection string for testing
    """

    __test__ = False

    APP_ENV: str = "testing"
    DEBUG: bool = True
    DATABASE_URL: Optional[str] = "sqlite+aiosqlite:///:memory:"
