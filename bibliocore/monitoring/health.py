"""
Health check functionality.

This module provides the health endpoint and the registry of component checks
behind it. The endpoint answers with a JSON:API single-resource document of
type ``health``; its status is ``ok`` when every check passes.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, FastAPI, Request, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import bibliocore.db.engine as db_engine
from bibliocore.config.base import BaseAppSettings
from bibliocore.logging import ensure_logger
from bibliocore.schemas import resource, single_document


class HealthStatus(str, Enum):
    """Health status indicators."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthCheck:
    """
    Health check component that can be registered with the health system.

    A health check is an async function that returns a status and optional
    details about one component of the system (e.g., the database).
    """

    def __init__(
        self,
        name: str,
        check_func: Callable[[], Awaitable[Dict[str, Any]]],
        tags: Optional[List[str]] = None,
    ):
        self.name = name
        self.check_func = check_func
        self.tags = tags or []

    async def run(self) -> Dict[str, Any]:
        """
        Run the health check and return the result.

        Returns:
            Dict containing name, status, details and tags
        """
        result = await self.check_func()
        return {
            "name": self.name,
            "status": result.get("status", HealthStatus.HEALTHY),
            "details": result.get("details", {}),
            "tags": self.tags,
        }


class HealthCheckRegistry:
    """
    Registry for health checks.

    Maintains a collection of health checks that can be executed
    to determine overall system health.
    """

    def __init__(self):
        self.checks: List[HealthCheck] = []

    def register(self, check: HealthCheck) -> None:
        self.checks.append(check)

    async def run_all(self) -> Dict[str, Any]:
        """
        Run all registered health checks.

        Returns:
            Dict containing overall status and individual check results
        """
        results = []
        overall_status = HealthStatus.HEALTHY
        for check in self.checks:
            result = await check.run()
            results.append(result)
            if result["status"] == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
        return {"status": overall_status, "checks": results}


async def db_health_check() -> Dict[str, Any]:
    """
    Check database connectivity with ``SELECT 1``.

    Returns:
        Health check result for the database
    """
    if db_engine.SessionLocal is None:
        return {
            "status": HealthStatus.UNHEALTHY,
            "details": {"error": "database not initialized", "connected": False},
        }
    try:
        async with db_engine.SessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return {
            "status": HealthStatus.UNHEALTHY,
            "details": {"error": type(e).__name__, "connected": False},
        }
    return {"status": HealthStatus.HEALTHY, "details": {"connected": True}}


def setup_health_endpoint(
    app: FastAPI,
    settings: BaseAppSettings,
    logger: Optional[logging.Logger] = None,
) -> HealthCheckRegistry:
    """
    Set up the health check endpoint.

    The registry is stored on ``app.state.health_registry`` so further checks
    can be registered after setup.

    Args:
        app: FastAPI application
        settings: Application settings
        logger: Optional logger

    Returns:
        The application's health check registry
    """
    log = ensure_logger(logger, __name__, settings)

    include_details = settings.HEALTH_INCLUDE_DETAILS
    registry = HealthCheckRegistry()
    registry.register(
        HealthCheck(name="database", check_func=db_health_check, tags=["core", "database"])
    )
    app.state.health_registry = registry

    router = APIRouter(tags=["monitoring"])

    @router.get(settings.HEALTH_PATH)
    async def health_check(request: Request, response: Response):
        """
        Report the health of the service and its database.
        """
        result = await request.app.state.health_registry.run_all()
        healthy = result["status"] == HealthStatus.HEALTHY
        if not healthy:
            log.warning(f"Health check failed: {result['checks']}")
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

        attributes: Dict[str, Any] = {"status": "ok" if healthy else "unhealthy"}
        if include_details:
            attributes["checks"] = [
                {
                    "name": check["name"],
                    "status": HealthStatus(check["status"]).value,
                    **check["details"],
                }
                for check in result["checks"]
            ]
        return single_document(resource("health", "health", attributes))

    app.include_router(router)
    log.info(f"Health check endpoint configured at {settings.HEALTH_PATH}")
    return registry
