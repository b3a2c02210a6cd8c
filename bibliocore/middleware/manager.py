"""
Middleware setup.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from bibliocore.config.base import BaseAppSettings
from bibliocore.logging import ensure_logger

from .cors import add_cors_middleware
from .timing import TimingMiddleware


def setup_middlewares(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Set up all middlewares for the application.

    Features:
    - Adds CORS middleware (configurable via settings.MIDDLEWARE_CORS_OPTIONS)
    - Adds request timing/trace logging (header from settings.REQUEST_TIMING_HEADER)

    Limitations:
    - Middleware is set up at startup, not dynamically per request
    """
    log = ensure_logger(logger, __name__, settings)

    app.add_middleware(
        TimingMiddleware,
        header_name=settings.REQUEST_TIMING_HEADER,
        exclude_paths=[settings.METRICS_PATH],
        logger=log,
    )
    add_cors_middleware(app, settings, log)
