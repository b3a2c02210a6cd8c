"""
Response schemas for the library API.

This module provides the JSON:API document models and the helpers that
build resource objects, collection documents and error documents.
"""

from bibliocore.schemas.jsonapi import (
    ErrorSource,
    JsonApiDocument,
    JsonApiError,
    JsonApiErrorDocument,
    PagedResponse,
    collection_document,
    pagination_meta,
    resource,
    resource_with_fields,
    single_document,
)

__all__ = [
    # Document models
    "JsonApiDocument",
    "JsonApiError",
    "JsonApiErrorDocument",
    "ErrorSource",
    "PagedResponse",
    # Builders
    "resource",
    "resource_with_fields",
    "single_document",
    "collection_document",
    "pagination_meta",
]
