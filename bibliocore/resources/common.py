"""
Shared plumbing for the resource endpoints.

Each resource declares a ``ResourceDefinition``: its table, selected columns,
JSON:API type, allow-lists and includable relations. The list and read
handlers below run the whole query pipeline for any definition:

1. validate sort and filter parameters against the allow-lists
2. run the count and page queries with the same filter binds
3. resolve requested relations with a per-request resolver
4. serialize rows as JSON:API resource objects with sparse fieldsets

The write helpers insert, update and delete one row of a definition's table.
Column names come from the endpoint's request model, never from the client,
and every value is bound. ``stamps`` map columns to fixed SQL expressions
such as ``CURRENT_DATE``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bibliocore.api import (
    FilterClause,
    FilterField,
    InclusionResolver,
    ListParams,
    Pagination,
    QueryExecutor,
    SortField,
    filter_clauses,
    where_clause,
)
from bibliocore.api.inclusion import Relation
from bibliocore.db import get_db
from bibliocore.errors import NotFoundError
from bibliocore.schemas import (
    JsonApiDocument,
    PagedResponse,
    collection_document,
    pagination_meta,
    resource_with_fields,
    single_document,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceDefinition:
    """
    Static description of a JSON:API resource backed by one table.

    Attributes:
        type: JSON:API resource type, also the ``fields[<type>]`` key
        table: Source table
        columns: Selected columns, in attribute order
        id_column: Column used as the resource id
        default_sort: ORDER BY body used when the client sends no ``sort``
        sorts: Sort allow-list
        filters: Filter allow-list
        relations: Includable relations
    """

    type: str
    table: str
    columns: Tuple[str, ...]
    id_column: str
    default_sort: str
    sorts: Tuple[SortField, ...] = ()
    filters: Tuple[FilterField, ...] = ()
    relations: Tuple[Relation, ...] = ()

    @property
    def select_list(self) -> str:
        return ", ".join(self.columns)

    def count_sql(self, where: str = "") -> str:
        return f"SELECT COUNT(*) FROM {self.table} {where}".rstrip()

    def data_sql(self, where: str, order_by: str) -> str:
        return (
            f"SELECT {self.select_list} FROM {self.table} {where} "
            f"ORDER BY {order_by} LIMIT ? OFFSET ?"
        )

    def row_sql(self, column: Optional[str] = None) -> str:
        return f"SELECT {self.select_list} FROM {self.table} WHERE {column or self.id_column} = ?"

    def insert_sql(
        self, columns: Sequence[str], stamps: Optional[Mapping[str, str]] = None
    ) -> str:
        stamps = stamps or {}
        names = [*columns, *stamps]
        values = ["?"] * len(columns) + list(stamps.values())
        return f"INSERT INTO {self.table} ({', '.join(names)}) VALUES ({', '.join(values)})"

    def update_sql(
        self, columns: Sequence[str], stamps: Optional[Mapping[str, str]] = None
    ) -> str:
        assignments = [f"{column} = ?" for column in columns]
        assignments.extend(
            f"{column} = {expression}" for column, expression in (stamps or {}).items()
        )
        return f"UPDATE {self.table} SET {', '.join(assignments)} WHERE {self.id_column} = ?"

    def delete_sql(self) -> str:
        return f"DELETE FROM {self.table} WHERE {self.id_column} = ?"


async def get_executor(session: AsyncSession = Depends(get_db)) -> QueryExecutor:
    """FastAPI dependency wrapping the request's session in a QueryExecutor."""
    return QueryExecutor(session)


def attach_relations(row: Mapping[str, Any], related: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge resolved relations into a row; lookups that found nothing are omitted."""
    attributes = dict(row)
    attributes.update({name: value for name, value in related.items() if value is not None})
    return attributes


async def serialize_rows(
    definition: ResourceDefinition,
    rows: Sequence[Mapping[str, Any]],
    params: ListParams,
    executor: QueryExecutor,
):
    resolver = InclusionResolver(executor, definition.relations, params.includes())
    fields = params.fieldset(definition.type)
    data = []
    for row in rows:
        attributes = attach_relations(row, await resolver.resolve(row))
        data.append(
            resource_with_fields(definition.type, row[definition.id_column], attributes, fields)
        )
    return data


async def list_resources(
    definition: ResourceDefinition,
    params: ListParams,
    executor: QueryExecutor,
    filters: Optional[Mapping[str, Sequence[str]]] = None,
    search: Sequence[FilterClause] = (),
) -> JsonApiDocument:
    """
    Run a paginated, sorted, filtered list query for a resource.

    Args:
        definition: The resource definition
        params: Parsed list parameters
        executor: Executor bound to the request's session
        filters: Filters to apply instead of ``params.filters``
        search: Clauses of which at least one must match, ANDed with the
            filters

    Returns:
        JSON:API collection document with pagination meta

    Raises:
        BadRequestError: For unsupported sorts or filters, before any query runs
    """
    pagination = params.pagination()
    order_by = params.sort_clause(definition.sorts, definition.default_sort)
    clauses = filter_clauses(
        params.filters if filters is None else filters, definition.filters
    )
    where = where_clause(clauses, any_of=search)

    total, rows = await executor.fetch_page(
        definition.count_sql(where),
        definition.data_sql(where, order_by),
        [*search, *clauses],
        pagination,
    )
    data = await serialize_rows(definition, rows, params, executor)
    return collection_document(data, pagination_meta(pagination.page, pagination.size, total))


async def read_resource(
    definition: ResourceDefinition,
    params: ListParams,
    executor: QueryExecutor,
    value: Any,
    column: Optional[str] = None,
) -> JsonApiDocument:
    """
    Fetch one resource by id (or by another unique column).

    Raises:
        NotFoundError: If no row matches
    """
    row = await executor.fetch_one(
        definition.row_sql(column), value, resource_type=definition.type
    )
    data = await serialize_rows(definition, [row], params, executor)
    return single_document(data[0])


async def list_table(
    executor: QueryExecutor,
    table: str,
    columns: Sequence[str],
    order_by: str,
    pagination: Pagination,
) -> PagedResponse:
    """
    Page through a lookup table, returning the plain paged payload.
    """
    total, rows = await executor.fetch_page(
        f"SELECT COUNT(*) FROM {table}",
        f"SELECT {', '.join(columns)} FROM {table} ORDER BY {order_by} LIMIT ? OFFSET ?",
        (),
        pagination,
    )
    return PagedResponse(data=rows, page=pagination.page, per_page=pagination.size, total=total)


async def create_resource(
    definition: ResourceDefinition,
    params: ListParams,
    executor: QueryExecutor,
    values: Mapping[str, Any],
    stamps: Optional[Mapping[str, str]] = None,
    key: Any = None,
) -> JsonApiDocument:
    """
    Insert one row and return it as a JSON:API document.

    Args:
        definition: The resource definition
        params: Parsed list parameters, for include and fieldsets on the result
        executor: Executor bound to the request's session
        values: Column to value, bound in order
        stamps: Column to fixed SQL expression
        key: Id of the new row when the client supplies it; otherwise the
            generated key reported by the driver is used

    Raises:
        ConflictError: If the row collides with an existing one
    """
    result = await executor.execute(
        definition.insert_sql(list(values), stamps), *values.values()
    )
    await executor.commit()
    if key is None:
        key = result.lastrowid
    logger.debug(f"Created {definition.type} id={key}")
    return await read_resource(definition, params, executor, key)


async def update_resource(
    definition: ResourceDefinition,
    params: ListParams,
    executor: QueryExecutor,
    resource_id: Any,
    values: Mapping[str, Any],
    stamps: Optional[Mapping[str, str]] = None,
    key: Any = None,
) -> JsonApiDocument:
    """
    Update one row by id and return it as a JSON:API document.

    ``key`` is the row's id after the update when the update changes it.

    Raises:
        NotFoundError: If no row has ``resource_id``
        ConflictError: If the new values collide with another row
    """
    result = await executor.execute(
        definition.update_sql(list(values), stamps), *values.values(), resource_id
    )
    if not result.rowcount:
        raise NotFoundError(resource_type=definition.type, resource_id=resource_id)
    await executor.commit()
    logger.debug(f"Updated {definition.type} id={resource_id}")
    return await read_resource(
        definition, params, executor, resource_id if key is None else key
    )


async def delete_resource(
    definition: ResourceDefinition, executor: QueryExecutor, resource_id: Any
) -> None:
    """
    Delete one row by id.

    Raises:
        NotFoundError: If no row has ``resource_id``
    """
    result = await executor.execute(definition.delete_sql(), resource_id)
    if not result.rowcount:
        raise NotFoundError(resource_type=definition.type, resource_id=resource_id)
    await executor.commit()
    logger.debug(f"Deleted {definition.type} id={resource_id}")
