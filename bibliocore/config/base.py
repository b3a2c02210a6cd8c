"""
Base configuration module for the library API.

This module provides the base settings class that other settings classes inherit from.
It handles application identity, database connectivity, logging, middleware and
monitoring options.
"""

from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

# Async drivers the engine can be created with
ASYNC_DRIVERS = ("mysql+aiomysql://", "mysql+asyncmy://", "sqlite+aiosqlite://")


class BaseAppSettings(BaseSettings):
    """
    Base settings class for application configuration.

    This class provides the foundation for all environment-specific settings classes.
    Values are read from environment variables (and an optional ``.env`` file).

    Attributes:
        APP_NAME: The name of the application
        APP_ENV: Environment name (development, testing, production)
        DEBUG: Flag to enable/disable debug mode
        VERSION: Application version string
        DB_HOST: Database host, used when DATABASE_URL is not given
        DB_PORT: Database port, used when DATABASE_URL is not given
        DB_USER: Database user, used when DATABASE_URL is not given
        DB_PASSWORD: Database password, used when DATABASE_URL is not given
        DB_NAME: Database name, used when DATABASE_URL is not given
        DATABASE_URL: Async SQLAlchemy database URL
        DB_ECHO: Enable SQL query logging (echo)
        DB_POOL_SIZE: Maximum number of pooled connections
        DB_POOL_TIMEOUT: Seconds to wait for a free pooled connection
        LOG_LEVEL: Logging level name
        LOG_JSON_FORMAT: Emit logs as JSON lines
        MIDDLEWARE_CORS_OPTIONS: CORS middleware options (passed to CORSMiddleware)
        REQUEST_TIMING_HEADER: Response header carrying the processing time
        HEALTH_PATH: Health check endpoint path
        HEALTH_INCLUDE_DETAILS: Include detailed health check info in response
        METRICS_PATH: Prometheus metrics endpoint path
        METRICS_EXCLUDE_PATHS: List of paths to exclude from metrics collection
        BIND_HOST: Interface the HTTP server listens on
        BIND_PORT: Port the HTTP server listens on
    """

    APP_NAME: str = Field(default="bibliocore")
    APP_ENV: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    VERSION: str = Field(default="0.1.0")

    # Database configuration
    DB_HOST: str = Field(default="localhost")
    DB_PORT: int = Field(default=3306)
    DB_USER: str = Field(default="root")
    DB_PASSWORD: str = Field(default="")
    DB_NAME: str = Field(default="slims")
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Database connection URL; built from DB_* when omitted",
    )
    DB_ECHO: bool = Field(default=False, description="Enable SQL query logging (echo)")
    DB_POOL_SIZE: int = Field(
        default=10, ge=1, description="Maximum number of pooled connections"
    )
    DB_POOL_TIMEOUT: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a pooled connection"
    )

    # Logging configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level name")
    LOG_JSON_FORMAT: bool = Field(default=False, description="Emit JSON log lines")

    # Middleware configuration
    MIDDLEWARE_CORS_OPTIONS: dict = Field(
        default_factory=lambda: {
            "allow_origins": ["*"],
            "allow_credentials": False,
            "allow_methods": ["*"],
            "allow_headers": ["*"],
        },
        description="CORS middleware options (passed to CORSMiddleware)",
    )
    REQUEST_TIMING_HEADER: str = Field(
        default="X-Process-Time",
        description="Response header carrying the request processing time",
    )

    # Monitoring configuration
    HEALTH_PATH: str = Field(
        default="/health", description="Health check endpoint path"
    )
    HEALTH_INCLUDE_DETAILS: bool = Field(
        default=True, description="Include detailed health check info in response"
    )
    METRICS_PATH: str = Field(
        default="/metrics", description="Prometheus metrics endpoint path"
    )
    METRICS_EXCLUDE_PATHS: List[str] = Field(
        default=["/metrics", "/health"],
        description="List of paths to exclude from metrics collection",
    )

    # Server
    BIND_HOST: str = Field(default="0.0.0.0")
    BIND_PORT: int = Field(default=3000)

    @field_validator("DATABASE_URL", mode="before")
    def build_database_url(cls, value, info):
        """
        Build the URL from the DB_* parts when not set, and insist on an async driver.
        """
        if not value:
            data = info.data
            return (
                f"mysql+aiomysql://{data.get('DB_USER', 'root')}:"
                f"{data.get('DB_PASSWORD', '')}@{data.get('DB_HOST', 'localhost')}:"
                f"{data.get('DB_PORT', 3306)}/{data.get('DB_NAME', 'slims')}"
            )
        if not value.startswith(ASYNC_DRIVERS):
            raise ValueError(
                "DATABASE_URL must use an async driver "
                f"({', '.join(ASYNC_DRIVERS)}). You provided: {value.split('://')[0]}://"
            )
        return value

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, value):
        """Upper-case the level name so 'debug' and 'DEBUG' are equivalent."""
        return str(value or "INFO").upper()

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")
