"""
FastAPI application factory.

This module wires the library API together: error handling, the database
lifecycle, middleware, monitoring and the resource routers.
"""

from typing import Optional

from fastapi import FastAPI

from bibliocore.config import BaseAppSettings, get_settings
from bibliocore.db import setup_db
from bibliocore.errors import setup_errors
from bibliocore.logging import ensure_logger
from bibliocore.middleware import setup_middlewares
from bibliocore.monitoring import setup_monitoring
from bibliocore.resources import api_router


def configure_app(app: FastAPI, settings: Optional[BaseAppSettings] = None) -> None:
    """
    Configure a FastAPI application with the library API.

    Args:
        app: The FastAPI application to configure
        settings: Optional application settings, if not provided will be loaded
                 from environment
    """
    app_settings = settings or get_settings()
    logger = ensure_logger(None, "bibliocore", app_settings)

    app.debug = app_settings.DEBUG
    app.state.settings = app_settings

    # Configure error handling (required)
    setup_errors(app, app_settings, logger)
    # Configure database lifecycle
    setup_db(app, app_settings, logger)
    # Configure middleware (CORS, request timing)
    setup_middlewares(app, app_settings, logger)
    # Configure health checks and metrics
    setup_monitoring(app, app_settings, logger)

    app.include_router(api_router)
    logger.info(f"{app_settings.APP_NAME} configured for {app_settings.APP_ENV}")


def create_app(settings: Optional[BaseAppSettings] = None) -> FastAPI:
    """
    Create and configure a new FastAPI application.

    Example:
        ```python
        from bibliocore.config import TestingSettings
        from bibliocore.factory import create_app

        app = create_app(TestingSettings())
        ```
    """
    app_settings = settings or get_settings()
    app = FastAPI(title=app_settings.APP_NAME, version=app_settings.VERSION)
    configure_app(app, app_settings)
    return app
