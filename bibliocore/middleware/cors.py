"""
CORS middleware integration.

Adds CORS middleware to the application using options from settings. The
default is fully permissive, since the API is read-only and token-free.

Limitations:
- Only global CORS configuration is supported (no per-route config)
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bibliocore.config.base import BaseAppSettings


def add_cors_middleware(
    app: FastAPI, settings: BaseAppSettings, logger: logging.Logger
) -> None:
    """
    Add CORS middleware configured from ``settings.MIDDLEWARE_CORS_OPTIONS``.
    """
    cors_options = dict(settings.MIDDLEWARE_CORS_OPTIONS)
    logger.info(f"Configuring CORS middleware with options: {cors_options}")
    app.add_middleware(CORSMiddleware, **cors_options)
