"""
Logging configuration for the library API.

Loggers write to stdout, either as plain text or as JSON lines. Level and
format come from ``LOG_LEVEL``, ``DEBUG`` and ``LOG_JSON_FORMAT`` in the
application settings.

Request-scoped objects ask for their module logger on every request, so a
logger is only (re)configured when settings are passed or it has no handler
yet.
"""

import logging
import sys
from typing import Optional, Tuple

from bibliocore.config.base import BaseAppSettings
from bibliocore.logging.formatters import JsonFormatter

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str,
    level: str = "INFO",
    debug: bool = False,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the logger ``name`` with a single stdout handler.

    Args:
        name: Logger name (usually __name__)
        level: Level name; unknown names fall back to INFO
        debug: Forces DEBUG regardless of ``level``
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured logger
    """
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def _options(settings: BaseAppSettings) -> Tuple[str, bool, bool]:
    level = getattr(settings, "LOG_LEVEL", None) or "INFO"
    debug = bool(getattr(settings, "DEBUG", False))
    json_format = bool(getattr(settings, "LOG_JSON_FORMAT", False))
    return level, debug, json_format


def get_logger(name: str, settings: Optional[BaseAppSettings] = None) -> logging.Logger:
    """
    Get the logger ``name``, configured from ``settings``.

    Without settings, an already configured logger is returned unchanged and
    a new one gets INFO level plain text output.
    """
    if settings is None:
        logger = logging.getLogger(name)
        if logger.handlers:
            return logger
        return setup_logger(name)

    level, debug, json_format = _options(settings)
    return setup_logger(name, level=level, debug=debug, json_format=json_format)


def ensure_logger(
    logger: Optional[logging.Logger] = None,
    name: Optional[str] = None,
    settings: Optional[BaseAppSettings] = None,
) -> logging.Logger:
    """
    Return ``logger`` if given, else the logger ``name`` from :func:`get_logger`.

    Raises:
        ValueError: If neither a logger nor a name is given
    """
    if logger:
        return logger

    if not name:
        raise ValueError("Module name must be provided when logger is not specified")

    return get_logger(name, settings)
