"""
Monitoring for the library API: health checks and Prometheus metrics.
"""

from bibliocore.monitoring.health import (
    HealthCheck,
    HealthCheckRegistry,
    HealthStatus,
    db_health_check,
    setup_health_endpoint,
)
from bibliocore.monitoring.manager import setup_monitoring
from bibliocore.monitoring.metrics import PrometheusMiddleware, setup_metrics_endpoint

__all__ = [
    "setup_monitoring",
    "setup_health_endpoint",
    "setup_metrics_endpoint",
    "HealthCheck",
    "HealthCheckRegistry",
    "HealthStatus",
    "db_health_check",
    "PrometheusMiddleware",
]
