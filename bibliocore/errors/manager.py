"""
Error management functionality.

This module provides the entry point for configuring error handling in the
application, including exception handler registration.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from bibliocore.config.base import BaseAppSettings
from bibliocore.errors.handlers import register_exception_handlers
from bibliocore.logging import ensure_logger


def setup_errors(
    app: FastAPI,
    settings: Optional[BaseAppSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Configure error handling for a FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Optional application settings
        logger: Optional logger for logging exceptions
    """
    log = ensure_logger(logger, __name__, settings)
    register_exception_handlers(app, logger=log)
