"""
Error handling module for the library API.

This module provides the exception hierarchy, the JSON:API error document
builder and the exception handlers.

Limitations:
- Error response structure is fixed; customization requires code changes.
- Only HTTP-style errors are supported (exceptions must inherit from AppError
  or be handled by FastAPI).
"""

from bibliocore.errors.exceptions import (
    AppError,
    BadRequestError,
    ConflictError,
    DBError,
    EmptySearchError,
    InvalidFilterValueError,
    InvalidPaginationError,
    MultipleFilterValuesError,
    NotFoundError,
    UnsupportedFilterError,
    UnsupportedSortError,
)
from bibliocore.errors.handlers import create_error_response, register_exception_handlers
from bibliocore.errors.manager import setup_errors

__all__ = [
    # Main setup function
    "setup_errors",
    # Handler registration
    "register_exception_handlers",
    "create_error_response",
    # Exception classes
    "AppError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "DBError",
    "InvalidPaginationError",
    "UnsupportedSortError",
    "UnsupportedFilterError",
    "MultipleFilterValuesError",
    "InvalidFilterValueError",
    "EmptySearchError",
]
