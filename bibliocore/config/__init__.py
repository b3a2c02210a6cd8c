"""
Configuration module for bibliocore.

This module provides:
- BaseAppSettings: The base class for application settings, supporting environment variable loading.
- Environment-specific settings (development, testing, production).
- get_settings: Factory for loading the correct settings class based on APP_ENV.

Example environment variables (to be placed in your .env or environment):

APP_NAME="bibliocore"
APP_ENV="development"  # Options: development, testing, production
DEBUG=true

# Database configuration (either a full URL or its parts)
DATABASE_URL="mysql+aiomysql://<username>:<password>@<host>:<port>/<database_name>"
DB_HOST="localhost"
DB_PORT=3306
DB_USER="root"
DB_PASSWORD=""
DB_NAME="slims"
DB_ECHO=false
DB_POOL_SIZE=10
DB_POOL_TIMEOUT=10

# Logging
LOG_LEVEL="INFO"
LOG_JSON_FORMAT=false

# Monitoring configuration
HEALTH_PATH="/health"
METRICS_PATH="/metrics"
METRICS_EXCLUDE_PATHS='["/metrics", "/health"]'

# Server
BIND_HOST="0.0.0.0"
BIND_PORT=3000
"""

from .base import BaseAppSettings
from .development import DevelopmentSettings
from .production import ProductionSettings
from .settings import get_settings
from .testing import TestingSettings

__all__ = [
    "BaseAppSettings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestingSettings",
    "get_settings",
]
