"""
Exception handlers for the library API.

This module converts application exceptions into JSON:API error documents
(``{"errors": [{status, code, title, detail, source?}]}``).
"""

import logging
from functools import partial
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from bibliocore.errors.exceptions import AppError, BadRequestError
from bibliocore.logging import ensure_logger
from bibliocore.schemas import ErrorSource, JsonApiError, JsonApiErrorDocument


def _title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def create_error_response(
    status_code: int,
    detail: str,
    code: str = "ERROR",
    parameter: Optional[str] = None,
    errors: Optional[List[JsonApiError]] = None,
) -> JsonApiErrorDocument:
    """
    Create a JSON:API error document.

    Args:
        status_code: HTTP status code
        detail: Error message
        code: Error code identifier
        parameter: Optional name of the offending request parameter
        errors: Prebuilt error objects; replaces the single generated one

    Returns:
        Error document
    """
    if errors is None:
        errors = [
            JsonApiError(
                status=str(int(status_code)),
                code=code,
                title=_title(status_code),
                detail=detail,
                source=ErrorSource(parameter=parameter) if parameter else None,
            )
        ]
    return JsonApiErrorDocument(errors=errors)


def _error_json(status_code: int, document: JsonApiErrorDocument) -> JSONResponse:
    return JSONResponse(
        status_code=int(status_code),
        content=jsonable_encoder(document, exclude_none=True),
    )


def _create_validation_errors(
    errors_data: List[Dict[str, Any]], exclude_body: bool = False
) -> List[JsonApiError]:
    """
    Create JSON:API error objects from pydantic validation errors.

    Args:
        errors_data: List of error dictionaries
        exclude_body: Whether to exclude 'body' from location paths

    Returns:
        List of error objects
    """
    errors = []
    for error in errors_data:
        loc = error.get("loc", [])
        if exclude_body:
            field_path = ".".join([str(item) for item in loc if item != "body"])
        else:
            field_path = ".".join([str(item) for item in loc])

        errors.append(
            JsonApiError(
                status=str(status.HTTP_422_UNPROCESSABLE_ENTITY),
                code="VALIDATION_ERROR",
                title=_title(status.HTTP_422_UNPROCESSABLE_ENTITY),
                detail=error.get("msg", "Validation error"),
                source=ErrorSource(parameter=field_path) if field_path else None,
            )
        )
    return errors


async def app_error_handler(
    request: Request, exc: AppError, logger: Optional[logging.Logger] = None
) -> JSONResponse:
    """
    Handler for AppError and its subclasses.

    Args:
        request: FastAPI request
        exc: AppError instance
        logger: Optional logger

    Returns:
        JSON response with the error document
    """
    log = ensure_logger(logger, __name__)
    if exc.status_code >= 500:
        log.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        log.debug(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    parameter = exc.parameter if isinstance(exc, BadRequestError) else None
    document = create_error_response(
        status_code=exc.status_code,
        detail=exc.message,
        code=exc.code,
        parameter=parameter,
    )
    return _error_json(exc.status_code, document)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for FastAPI's RequestValidationError.

    Args:
        request: FastAPI request
        exc: RequestValidationError instance

    Returns:
        JSON response with one error object per invalid field
    """
    errors = _create_validation_errors(exc.errors(), exclude_body=True)
    document = create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Request validation error",
        code="VALIDATION_ERROR",
        errors=errors,
    )
    return _error_json(status.HTTP_422_UNPROCESSABLE_ENTITY, document)


async def pydantic_validation_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handler for Pydantic's ValidationError.

    Args:
        request: FastAPI request
        exc: Pydantic ValidationError instance

    Returns:
        JSON response with one error object per invalid field
    """
    errors = _create_validation_errors(exc.errors(), exclude_body=False)
    document = create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Data validation error",
        code="VALIDATION_ERROR",
        errors=errors,
    )
    return _error_json(status.HTTP_422_UNPROCESSABLE_ENTITY, document)


async def unhandled_exception_handler(
    request: Request, exc: Exception, logger: Optional[logging.Logger] = None
) -> JSONResponse:
    """
    Generic exception handler for unhandled exceptions.

    The traceback is logged and never returned to the client.

    Args:
        request: FastAPI request
        exc: Unhandled exception
        logger: Optional logger to use instead of default logging

    Returns:
        JSON response with a generic error message
    """
    log = ensure_logger(logger, __name__)
    log.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )

    document = create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
        code="INTERNAL_ERROR",
    )
    return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, document)


def register_exception_handlers(
    app: FastAPI, logger: Optional[logging.Logger] = None
) -> None:
    """
    Register all exception handlers with a FastAPI application.

    Args:
        app: FastAPI application instance
        logger: Optional logger for logging exceptions
    """
    # The AppError handler covers every subclass
    app.exception_handler(AppError)(partial(app_error_handler, logger=logger))

    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(PydanticValidationError)(pydantic_validation_handler)

    app.exception_handler(Exception)(partial(unhandled_exception_handler, logger=logger))
