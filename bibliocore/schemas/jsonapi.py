"""
JSON:API document schemas.

This module contains the response envelopes used by the resource endpoints
and the helpers that build them.

Features:
- Single-resource and collection documents with optional ``meta``
- Sparse fieldsets applied while building resource objects
- Error documents with status, code, title, detail and source parameter
- Plain paged payload for lookup tables

Limitations:
- Related resources are embedded as attributes; the top-level ``included``
  member is never populated
- Resource ids are always serialized as strings
"""

from typing import AbstractSet, Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, model_serializer


class JsonApiDocument(BaseModel):
    """
    Top-level JSON:API document.

    ``meta`` and ``included`` are omitted from the serialized output when unset.

    Attributes:
        data: A resource object or a list of resource objects
        meta: Non-standard meta information (pagination for collections)
        included: Compound document resources
    """

    data: Any = Field(..., description="Primary data")
    meta: Optional[Dict[str, Any]] = Field(default=None, description="Document meta")
    included: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Included resources"
    )

    @model_serializer(mode="wrap")
    def _omit_unset_members(self, handler):
        document = handler(self)
        for member in ("meta", "included"):
            if document.get(member) is None:
                document.pop(member, None)
        return document


class ErrorSource(BaseModel):
    """Pointer to the request parameter that caused an error."""

    parameter: str = Field(..., description="Offending query parameter")


class JsonApiError(BaseModel):
    """
    A single JSON:API error object.

    Attributes:
        status: HTTP status code, as a string
        code: Application error code identifier
        title: Short summary of the problem (the HTTP reason phrase)
        detail: Human-readable explanation of this occurrence
        source: Optional pointer to the offending parameter
    """

    status: str = Field(..., description="HTTP status code as a string")
    code: str = Field(..., description="Error code identifier")
    title: Optional[str] = Field(default=None, description="Short problem summary")
    detail: Optional[str] = Field(default=None, description="Problem explanation")
    source: Optional[ErrorSource] = Field(default=None, description="Error source")


class JsonApiErrorDocument(BaseModel):
    """Top-level JSON:API error document."""

    errors: List[JsonApiError] = Field(default_factory=list)


class PagedResponse(BaseModel):
    """
    Plain paged payload used by the lookup-table endpoints.

    Attributes:
        data: Rows of the requested page
        page: Page number (1-based)
        per_page: Page size
        total: Number of rows matching the query
    """

    data: List[Dict[str, Any]] = Field(default_factory=list)
    page: int
    per_page: int
    total: int


def resource(
    resource_type: str, id: Union[str, int], attributes: Mapping[str, Any]
) -> Dict[str, Any]:
    """Build a resource object exposing every attribute."""
    return resource_with_fields(resource_type, id, attributes, None)


def resource_with_fields(
    resource_type: str,
    id: Union[str, int],
    attributes: Mapping[str, Any],
    fields: Optional[AbstractSet[str]] = None,
) -> Dict[str, Any]:
    """
    Build a resource object, keeping only the attributes named in ``fields``.

    Args:
        resource_type: JSON:API resource type
        id: Resource identifier; converted to a string
        attributes: Attribute mapping (included relations are attributes too)
        fields: Sparse fieldset for this type, or None to keep everything

    Returns:
        A ``{"type", "id", "attributes"}`` resource object
    """
    attrs = dict(attributes)
    if fields is not None:
        attrs = {key: value for key, value in attrs.items() if key in fields}
    return {"type": resource_type, "id": str(id), "attributes": attrs}


def single_document(resource_object: Dict[str, Any]) -> JsonApiDocument:
    return JsonApiDocument(data=resource_object)


def collection_document(
    data: List[Dict[str, Any]], meta: Dict[str, Any]
) -> JsonApiDocument:
    return JsonApiDocument(data=data, meta=meta)


def pagination_meta(page: int, per_page: int, total: int) -> Dict[str, int]:
    return {"page": page, "per_page": per_page, "total": total}
