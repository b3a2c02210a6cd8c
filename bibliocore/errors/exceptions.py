"""
Exception classes for the library API.

This module provides the exception hierarchy used throughout the application.
Every exception carries an HTTP status and a stable error code so that the
handlers in :mod:`bibliocore.errors.handlers` can turn it into a JSON:API
error document.

The query-engine errors (pagination, sorting, filtering, search) are all
``BadRequestError`` subclasses and record the offending query parameter in
``parameter``; they are raised before any database access.
"""

from http import HTTPStatus
from typing import Any, Dict, Optional, Union


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Error code identifier (default: ERROR)
        status_code: HTTP status code (default: 500)
        details: Additional error details
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        code: str = "ERROR",
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Exception raised when a requested row does not exist."""

    def __init__(
        self,
        message: str = "not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Union[str, int]] = None,
        code: str = "NOT_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ):
        if resource_type and resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
            details = details or {}
            details.update({"resource_type": resource_type, "resource_id": resource_id})

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.NOT_FOUND,
            details=details,
        )


class BadRequestError(AppError):
    """
    Exception raised for client-side errors in the request.

    Attributes:
        parameter: Query parameter or body field that caused the error, if known
    """

    def __init__(
        self,
        message: str = "Bad request",
        code: str = "BAD_REQUEST",
        parameter: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.parameter = parameter
        if parameter:
            details = details or {}
            details["parameter"] = parameter

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.BAD_REQUEST,
            details=details,
        )


class InvalidPaginationError(BadRequestError):
    """Raised when a page number or page size is not an integer."""

    def __init__(self, parameter: str, value: str):
        super().__init__(
            message=f"`{parameter}` must be an integer",
            code="INVALID_PAGINATION",
            parameter=parameter,
            details={"value": value},
        )


class UnsupportedSortError(BadRequestError):
    """Raised when a sort field is not in the resource's allow-list."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            message=f"sorting by `{field}` is not supported",
            code="UNSUPPORTED_SORT",
            parameter="sort",
        )


class UnsupportedFilterError(BadRequestError):
    """Raised when a filter name is not in the resource's allow-list."""

    def __init__(self, name: str, parameter: Optional[str] = None):
        self.name = name
        super().__init__(
            message=f"filter `{name}` is not supported",
            code="UNSUPPORTED_FILTER",
            parameter=parameter or f"filter[{name}]",
        )


class MultipleFilterValuesError(BadRequestError):
    """Raised when a filter carries more than one comma-separated value."""

    def __init__(self, name: str, parameter: Optional[str] = None):
        self.name = name
        super().__init__(
            message=f"multiple filter values for `{name}` are not supported",
            code="MULTIPLE_FILTER_VALUES",
            parameter=parameter or f"filter[{name}]",
        )


class InvalidFilterValueError(BadRequestError):
    """Raised when a filter value cannot be coerced to the field's type."""

    def __init__(self, name: str, expected: str, parameter: Optional[str] = None):
        self.name = name
        self.expected = expected
        super().__init__(
            message=f"filter `{name}` must be {expected}",
            code="INVALID_FILTER_VALUE",
            parameter=parameter or f"filter[{name}]",
        )


class EmptySearchError(BadRequestError):
    """Raised when a search request has nothing to search for."""

    def __init__(self, parameter: str, message: str = "search criteria must not be empty"):
        super().__init__(message=message, code="EMPTY_SEARCH", parameter=parameter)


class ConflictError(AppError):
    """Exception raised when a write collides with an existing row."""

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.CONFLICT,
            details=details,
        )


class DBError(AppError):
    """
    Exception raised for database-related errors.

    The message is generic; the underlying error is only logged.
    """

    def __init__(
        self,
        message: str = "database error",
        code: str = "DB_ERROR",
        details: Optional[dict] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            details=details,
        )
