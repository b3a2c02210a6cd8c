"""
Monitoring setup: health checks and Prometheus metrics.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from bibliocore.config.base import BaseAppSettings
from bibliocore.logging import ensure_logger
from bibliocore.monitoring.health import setup_health_endpoint
from bibliocore.monitoring.metrics import setup_metrics_endpoint


def setup_monitoring(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Configure monitoring for a FastAPI application.

    Features:
    - Health check endpoint with a database check (settings.HEALTH_PATH)
    - Prometheus metrics endpoint (settings.METRICS_PATH)

    Limitations:
    - No distributed tracing
    - Metrics endpoint is public unless protected by other means

    Args:
        app: FastAPI application instance
        settings: Application settings
        logger: Optional logger for monitoring events
    """
    log = ensure_logger(logger, __name__, settings)
    setup_health_endpoint(app, settings, log)
    setup_metrics_endpoint(app, settings, log)
    log.info("Monitoring configured successfully")
