"""
List-query engine.

This package turns untyped query-string parameters into safe, parameterized
SQL for the resource endpoints: pagination, sparse fieldsets, relationship
inclusion with per-request caches, and allow-listed sorting and filtering.
Only allow-listed column names are ever interpolated into SQL text; every
client-supplied value travels as a typed bind parameter.

Limitations:
- One value per filter; filters are ANDed, a search group is ORed
- Relations are resolved sequentially, row by row
"""

from bibliocore.api.binding import QueryExecutor, compile_statement, sql_type_for
from bibliocore.api.filtering import (
    FilterClause,
    FilterField,
    FilterOperator,
    FilterValue,
    FilterValueType,
    filter_clauses,
    where_clause,
)
from bibliocore.api.inclusion import (
    CollectionRelation,
    CustomRelation,
    InclusionResolver,
    LookupRelation,
    row_to_string_map,
)
from bibliocore.api.pagination import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MAX_PAGE,
    MAX_PER_PAGE,
    Pagination,
)
from bibliocore.api.params import ListParams, get_list_params, parse_include
from bibliocore.api.sorting import SortField, SortOrder, parse_sort_string, sort_clause

__all__ = [
    # Parameters
    "ListParams",
    "get_list_params",
    "parse_include",
    # Pagination
    "Pagination",
    "DEFAULT_PAGE",
    "DEFAULT_PER_PAGE",
    "MAX_PAGE",
    "MAX_PER_PAGE",
    # Sorting
    "SortField",
    "SortOrder",
    "parse_sort_string",
    "sort_clause",
    # Filtering
    "FilterField",
    "FilterOperator",
    "FilterValueType",
    "FilterValue",
    "FilterClause",
    "filter_clauses",
    "where_clause",
    # Execution
    "QueryExecutor",
    "compile_statement",
    "sql_type_for",
    # Inclusion
    "LookupRelation",
    "CollectionRelation",
    "CustomRelation",
    "InclusionResolver",
    "row_to_string_map",
]
