"""
Production environment specific settings.
"""

from .base import BaseAppSettings


class ProductionSettings(BaseAppSettings):
    """
    Settings class for production environment.

    Disables debug mode and switches logs to JSON lines.

    Attributes:
        DEBUG: Always False in production
        LOG_JSON_FORMAT: JSON logs for log aggregation
    """

    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_JSON_FORMAT: bool = True
