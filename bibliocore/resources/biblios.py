"""
Bibliographic records, with simple and advanced search and record upkeep.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from bibliocore.api import (
    CollectionRelation,
    CustomRelation,
    FilterField,
    FilterOperator,
    FilterValueType,
    ListParams,
    LookupRelation,
    QueryExecutor,
    SortField,
    get_list_params,
)
from bibliocore.errors import (
    EmptySearchError,
    MultipleFilterValuesError,
    UnsupportedFilterError,
)
from bibliocore.resources.common import (
    ResourceDefinition,
    create_resource,
    delete_resource,
    get_executor,
    list_resources,
    read_resource,
    update_resource,
)

BIBLIO_SORTS = (
    SortField("biblio_id", "biblio.biblio_id"),
    SortField("title", "biblio.title"),
    SortField("publish_year", "biblio.publish_year"),
    SortField("input_date", "biblio.input_date"),
    SortField("last_update", "biblio.last_update"),
)

BIBLIO_FILTERS = (
    FilterField("title", "biblio.title", FilterOperator.LIKE),
    FilterField("gmd_id", "biblio.gmd_id", value_type=FilterValueType.INTEGER),
    FilterField("publisher_id", "biblio.publisher_id", value_type=FilterValueType.INTEGER),
    FilterField("language_id", "biblio.language_id"),
    FilterField("publish_year", "biblio.publish_year"),
    FilterField("classification", "biblio.classification", FilterOperator.LIKE),
    FilterField("call_number", "biblio.call_number", FilterOperator.LIKE),
    FilterField("opac_hide", "biblio.opac_hide", value_type=FilterValueType.BOOLEAN),
    FilterField("promoted", "biblio.promoted", value_type=FilterValueType.BOOLEAN),
)

# Columns matched by the simple keyword search
SEARCH_FIELDS = (
    FilterField("title", "biblio.title", FilterOperator.LIKE),
    FilterField("call_number", "biblio.call_number", FilterOperator.LIKE),
)

BIBLIO_RELATIONS = (
    LookupRelation("gmd", "gmd_id", "SELECT gmd_id, gmd_name FROM mst_gmd WHERE gmd_id = ?"),
    LookupRelation(
        "publisher",
        "publisher_id",
        "SELECT publisher_id, publisher_name FROM mst_publisher WHERE publisher_id = ?",
    ),
    LookupRelation(
        "language",
        "language_id",
        "SELECT language_id, language_name FROM mst_language WHERE language_id = ?",
    ),
    LookupRelation(
        "content_type",
        "content_type_id",
        "SELECT id, content_type, code FROM mst_content_type WHERE id = ?",
        positive_only=True,
    ),
    LookupRelation(
        "media_type",
        "media_type_id",
        "SELECT id, media_type, code FROM mst_media_type WHERE id = ?",
        positive_only=True,
    ),
    LookupRelation(
        "carrier_type",
        "carrier_type_id",
        "SELECT id, carrier_type, code FROM mst_carrier_type WHERE id = ?",
        positive_only=True,
    ),
    LookupRelation(
        "frequency",
        "frequency_id",
        "SELECT frequency_id, frequency, language_prefix FROM mst_frequency "
        "WHERE frequency_id = ?",
        positive_only=True,
    ),
    LookupRelation(
        "place",
        "publish_place_id",
        "SELECT place_id, place_name FROM mst_place WHERE place_id = ?",
        positive_only=True,
    ),
    CollectionRelation(
        "authors",
        "biblio_id",
        "SELECT a.author_id, a.author_name, a.authority_type FROM biblio_author ba "
        "JOIN mst_author a ON ba.author_id = a.author_id WHERE ba.biblio_id = ?",
    ),
    CollectionRelation(
        "topics",
        "biblio_id",
        "SELECT t.topic_id, t.topic, t.topic_type FROM biblio_topic bt "
        "JOIN mst_topic t ON bt.topic_id = t.topic_id WHERE bt.biblio_id = ?",
    ),
    CollectionRelation(
        "items",
        "biblio_id",
        "SELECT item_id, item_code, call_number, coll_type_id, location_id, "
        "item_status_id, last_update FROM item WHERE biblio_id = ? ORDER BY item_id DESC",
    ),
    CollectionRelation(
        "attachments",
        "biblio_id",
        "SELECT f.file_id, f.file_title, f.file_name, f.file_url, f.file_dir, "
        "f.mime_type, ba.placement, ba.access_type, ba.access_limit "
        "FROM biblio_attachment ba JOIN files f ON f.file_id = ba.file_id "
        "WHERE ba.biblio_id = ? ORDER BY ba.file_id DESC",
        aliases=("files",),
    ),
    CollectionRelation(
        "relations",
        "biblio_id",
        "SELECT br.rel_biblio_id AS biblio_id, b.title, br.rel_type "
        "FROM biblio_relation br JOIN biblio b ON b.biblio_id = br.rel_biblio_id "
        "WHERE br.biblio_id = ?",
    ),
    CustomRelation("biblio_id", "SELECT * FROM biblio_custom WHERE biblio_id = ?"),
)

BIBLIOS = ResourceDefinition(
    type="biblios",
    table="biblio",
    columns=(
        "biblio_id",
        "title",
        "gmd_id",
        "publisher_id",
        "publish_year",
        "language_id",
        "content_type_id",
        "media_type_id",
        "carrier_type_id",
        "frequency_id",
        "publish_place_id",
        "classification",
        "call_number",
        "opac_hide",
        "promoted",
        "input_date",
        "last_update",
    ),
    id_column="biblio_id",
    default_sort="biblio.biblio_id DESC",
    sorts=BIBLIO_SORTS,
    filters=BIBLIO_FILTERS,
    relations=BIBLIO_RELATIONS,
)


class BiblioPayload(BaseModel):
    """Record fields accepted on create and update."""

    title: str = Field(..., min_length=1)
    gmd_id: Optional[int] = None
    publisher_id: Optional[int] = None
    publish_year: Optional[str] = Field(None, max_length=20)
    language_id: Optional[str] = Field(None, max_length=5)
    classification: Optional[str] = Field(None, max_length=40)
    call_number: Optional[str] = Field(None, max_length=50)
    opac_hide: bool = False
    promoted: bool = False


class SearchClause(BaseModel):
    """One ``field = value`` criterion of an advanced search."""

    field: str = Field(..., description="Filter name from the biblio filter allow-list")
    value: str = Field(..., description="Raw filter value")


class AdvancedSearchRequest(BaseModel):
    """Advanced search body; all clauses must match."""

    clauses: List[SearchClause] = Field(default_factory=list)


def advanced_search_filters(
    body: AdvancedSearchRequest, query_filters: Mapping[str, Sequence[str]]
) -> Dict[str, Tuple[str, ...]]:
    """
    Merge advanced search clauses with the ``filter[...]`` query parameters.

    Body clauses are validated here and reported by their position in
    ``clauses``; query filters are left to the list pipeline.

    Raises:
        EmptySearchError: If there are no clauses, or a clause value is blank
        UnsupportedFilterError: If a clause field is not a biblio filter
        MultipleFilterValuesError: If a field appears twice, in the body or
            in both the body and the query string
        InvalidFilterValueError: If a clause value does not fit its field
    """
    if not body.clauses:
        raise EmptySearchError("clauses", "advanced search requires at least one clause")

    fields = {entry.name: entry for entry in BIBLIO_FILTERS}
    filters = {name: tuple(values) for name, values in query_filters.items() if values}
    seen = set()
    for index, clause in enumerate(body.clauses):
        field = fields.get(clause.field)
        if field is None:
            raise UnsupportedFilterError(clause.field, parameter=f"clauses[{index}].field")
        value = clause.value.strip()
        if not value:
            raise EmptySearchError(
                f"clauses[{index}].value", f"search value for `{clause.field}` is empty"
            )
        if clause.field in seen or clause.field in filters:
            raise MultipleFilterValuesError(clause.field, parameter=f"clauses[{index}].field")
        field.to_clause(value, parameter=f"clauses[{index}].value")
        seen.add(clause.field)
        filters[clause.field] = (value,)
    return filters


router = APIRouter(prefix="/biblios", tags=["biblios"])


@router.get("")
async def list_biblios(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List bibliographic records.

    Include: ``gmd``, ``publisher``, ``language``, ``content_type``,
    ``media_type``, ``carrier_type``, ``frequency``, ``place``, ``authors``,
    ``topics``, ``items``, ``attachments`` (or ``files``), ``relations``,
    ``custom``.
    """
    return await list_resources(BIBLIOS, params, executor)


@router.get("/search")
async def simple_search_biblios(
    keyword: str = Query("", description="Matched against title and call number"),
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    Search records whose title or call number contains ``keyword``.

    ``filter[...]`` parameters narrow the matches as on the list endpoint.
    """
    keyword = keyword.strip()
    if not keyword:
        raise EmptySearchError("keyword", "search keyword must not be empty")

    search = [field.to_clause(keyword) for field in SEARCH_FIELDS]
    return await list_resources(BIBLIOS, params, executor, search=search)


@router.post("/search/advanced")
async def advanced_search_biblios(
    body: AdvancedSearchRequest,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    Search records matching every clause.

    Clause fields use the same names, operators and value types as the
    ``filter[...]`` parameters of the list endpoint, and any such query
    parameters are ANDed with the clauses. Every clause is validated before
    the query runs.
    """
    filters = advanced_search_filters(body, params.filters)
    return await list_resources(BIBLIOS, params, executor, filters=filters)


@router.get("/{biblio_id}")
async def get_biblio(
    biblio_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(BIBLIOS, params, executor, biblio_id)


@router.post("", status_code=201)
async def create_biblio(
    payload: BiblioPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await create_resource(
        BIBLIOS,
        params,
        executor,
        payload.model_dump(),
        stamps={"input_date": "CURRENT_TIMESTAMP", "last_update": "CURRENT_TIMESTAMP"},
    )


@router.put("/{biblio_id}")
async def update_biblio(
    biblio_id: int,
    payload: BiblioPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await update_resource(
        BIBLIOS,
        params,
        executor,
        biblio_id,
        payload.model_dump(),
        stamps={"last_update": "CURRENT_TIMESTAMP"},
    )


@router.delete("/{biblio_id}", status_code=204, response_class=Response)
async def delete_biblio(
    biblio_id: int,
    executor: QueryExecutor = Depends(get_executor),
):
    await delete_resource(BIBLIOS, executor, biblio_id)
    return Response(status_code=204)
