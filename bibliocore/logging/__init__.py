"""
Logging module for the library API.

Limitations:
- Only console (stdout) logging is supported out of the box.
- No file logging, log rotation, or external service integration.
"""

from bibliocore.logging.formatters import JsonFormatter
from bibliocore.logging.manager import ensure_logger, get_logger, setup_logger

__all__ = [
    "get_logger",
    "ensure_logger",
    "setup_logger",
    "JsonFormatter",
]
