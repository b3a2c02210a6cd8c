"""
Prometheus metrics collection and exposure.

Request metrics are labelled by route template (``/members/{member_id}``)
rather than the raw path, so the label set stays bounded.
"""

import logging
import time
from typing import Callable, List, Optional

from fastapi import APIRouter, FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from bibliocore.config.base import BaseAppSettings
from bibliocore.logging import ensure_logger

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total count of HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
)

REQUEST_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method"],
)

EXCEPTIONS_COUNT = Counter(
    "http_exceptions_total",
    "Total count of exceptions raised during HTTP requests",
    ["method", "endpoint", "exception_type"],
)

APP_INFO = Gauge(
    "bibliocore_app_info", "Application information", ["app_name", "version"]
)


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics.

    Tracks request counts, latency, in-flight requests and exceptions.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[List[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        method = request.method
        REQUEST_IN_PROGRESS.labels(method=method).inc()
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=_endpoint_label(request),
                status_code=response.status_code,
            ).inc()
            return response
        except Exception as exc:
            EXCEPTIONS_COUNT.labels(
                method=method,
                endpoint=_endpoint_label(request),
                exception_type=type(exc).__name__,
            ).inc()
            raise
        finally:
            REQUEST_LATENCY.labels(
                method=method, endpoint=_endpoint_label(request)
            ).observe(time.perf_counter() - start_time)
            REQUEST_IN_PROGRESS.labels(method=method).dec()


def setup_metrics_endpoint(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Set up metrics collection and the exposition endpoint.

    Args:
        app: FastAPI application
        settings: Application settings
        logger: Optional logger
    """
    log = ensure_logger(logger, __name__, settings)

    router = APIRouter(tags=["monitoring"])

    @router.get(settings.METRICS_PATH, include_in_schema=False)
    async def metrics():
        """Expose Prometheus metrics in the text exposition format."""
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    app.add_middleware(PrometheusMiddleware, exclude_paths=settings.METRICS_EXCLUDE_PATHS)
    app.include_router(router)

    APP_INFO.labels(app_name=settings.APP_NAME, version=settings.VERSION).set(1)
    log.info(f"Metrics endpoint configured at {settings.METRICS_PATH}")
