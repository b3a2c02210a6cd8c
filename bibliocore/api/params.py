"""
List request parameters.

This module decodes the raw query string of a list request into an immutable
``ListParams`` value. Decoding is pure: unknown ``fields[...]`` and
``filter[...]`` names are accepted here and only checked later against a
resource's allow-lists.

Recognized keys:
- ``page[number]`` (alias ``page``) and ``page[size]`` (alias ``per_page``)
- ``include``: comma-separated relation names
- ``sort``: comma-separated sort keys, ``-`` prefix for descending
- ``fields[<type>]``: sparse fieldset for a resource type
- ``filter[<name>]``: filter value

When a key is repeated, the last occurrence wins. The bracketed pagination
keys win over their aliases.
"""

import re
from types import MappingProxyType
from typing import (
    AbstractSet,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from fastapi import Request

from bibliocore.api.filtering import FilterClause, FilterField, filter_clauses
from bibliocore.api.pagination import Pagination
from bibliocore.api.sorting import SortField, SortOrder, parse_sort_string, sort_clause
from bibliocore.errors.exceptions import InvalidPaginationError

QueryItems = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

_PAGE_KEYS = ("page[number]", "page")
_SIZE_KEYS = ("page[size]", "per_page")
_BRACKET_RE = re.compile(r"(fields|filter)\[(.+)\]")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def split_list(value: str) -> List[str]:
    """Split a comma-separated value, trimming segments and dropping empty ones."""
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_include(raw: Optional[str]) -> FrozenSet[str]:
    """
    Parse an ``include`` value into a set of relation names.

    Examples:
        >>> sorted(parse_include("Foo, bar,, BAR"))
        ['bar', 'foo']
    """
    if not raw:
        return frozenset()
    return frozenset(part.lower() for part in split_list(raw))


def _parse_page_value(raw: Dict[str, str], keys: Sequence[str]) -> Optional[int]:
    for key in keys:
        if key in raw:
            value = raw[key]
            if not _INTEGER_RE.fullmatch(value):
                raise InvalidPaginationError(key, value)
            return int(value)
    return None


def _iter_items(query: QueryItems) -> Iterable[Tuple[str, str]]:
    if hasattr(query, "multi_items"):
        return query.multi_items()
    if isinstance(query, Mapping):
        return query.items()
    return query


class ListParams:
    """
    Parsed parameters of one list request.

    Instances are immutable and are consumed by exactly one handler call.

    Attributes:
        include: Raw ``include`` value, if any
        fields: Resource type to the attribute names to keep
        filters: Filter name to raw values
        sorts: Parsed sort keys in priority order
    """

    def __init__(
        self,
        pagination: Optional[Pagination] = None,
        include: Optional[str] = None,
        fields: Optional[Mapping[str, Iterable[str]]] = None,
        filters: Optional[Mapping[str, Iterable[str]]] = None,
        sorts: Sequence[SortOrder] = (),
    ):
        self._pagination = pagination or Pagination()
        self._include = include
        self._fields = MappingProxyType(
            {name: frozenset(values) for name, values in (fields or {}).items()}
        )
        self._filters = MappingProxyType(
            {name: tuple(values) for name, values in (filters or {}).items()}
        )
        self._sorts = tuple(sorts)

    @classmethod
    def from_query(cls, query: QueryItems) -> "ListParams":
        """
        Build ListParams from raw query-string pairs.

        Args:
            query: Starlette ``QueryParams``, a mapping, or ``(key, value)`` pairs

        Returns:
            Parsed parameters

        Raises:
            InvalidPaginationError: If a page number or size is not an integer
        """
        raw: Dict[str, str] = {}
        for key, value in _iter_items(query):
            # Last value wins
            raw.pop(key, None)
            raw[key] = value

        fields: Dict[str, FrozenSet[str]] = {}
        filters: Dict[str, Tuple[str, ...]] = {}
        for key, value in raw.items():
            match = _BRACKET_RE.fullmatch(key)
            if not match:
                continue
            kind, name = match.groups()
            values = split_list(value)
            if not values:
                continue
            if kind == "fields":
                fields[name] = frozenset(values)
            else:
                filters[name] = tuple(values)

        return cls(
            pagination=Pagination(
                page_number=_parse_page_value(raw, _PAGE_KEYS),
                page_size=_parse_page_value(raw, _SIZE_KEYS),
            ),
            include=raw.get("include"),
            fields=fields,
            filters=filters,
            sorts=parse_sort_string(raw.get("sort")),
        )

    @property
    def include(self) -> Optional[str]:
        return self._include

    @property
    def fields(self) -> Mapping[str, FrozenSet[str]]:
        return self._fields

    @property
    def filters(self) -> Mapping[str, Tuple[str, ...]]:
        return self._filters

    @property
    def sorts(self) -> Tuple[SortOrder, ...]:
        return self._sorts

    def pagination(self) -> Pagination:
        return self._pagination

    def includes(self) -> FrozenSet[str]:
        """Requested relation names, lower-cased and de-duplicated."""
        return parse_include(self._include)

    def fieldset(self, resource_type: str) -> Optional[AbstractSet[str]]:
        """Sparse fieldset for ``resource_type``, or None for all attributes."""
        return self._fields.get(resource_type)

    def sort_clause(self, allowed: Sequence[SortField], default: str) -> str:
        """See :func:`bibliocore.api.sorting.sort_clause`."""
        return sort_clause(self._sorts, allowed, default)

    def filter_clauses(self, allowed: Sequence[FilterField]) -> List[FilterClause]:
        """See :func:`bibliocore.api.filtering.filter_clauses`."""
        return filter_clauses(self._filters, allowed)

    def __repr__(self) -> str:
        return (
            f"ListParams(pagination={self._pagination!r}, include={self._include!r}, "
            f"fields={dict(self._fields)!r}, filters={dict(self._filters)!r}, "
            f"sorts={list(self._sorts)!r})"
        )


async def get_list_params(request: Request) -> ListParams:
    """
    FastAPI dependency that parses the request's query string.

    Example:
        ```python
        @router.get("/members")
        async def list_members(params: ListParams = Depends(get_list_params)):
            ...
        ```
    """
    return ListParams.from_query(request.query_params)
