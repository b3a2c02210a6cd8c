"""
Master-data lookup tables.

Every lookup is exposed as ``GET /lookups/<path>`` and answers with the plain
paged payload ``{data, page, per_page, total}``, ordered by primary key.
"""

from dataclasses import dataclass
from typing import Tuple

from fastapi import APIRouter, Depends

from bibliocore.api import ListParams, QueryExecutor, get_list_params
from bibliocore.resources.common import get_executor, list_table
from bibliocore.schemas import PagedResponse


@dataclass(frozen=True)
class LookupTable:
    """
    Attributes:
        path: URL segment under ``/lookups``
        table: Source table
        columns: Selected columns
        order_by: ORDER BY body
    """

    path: str
    table: str
    columns: Tuple[str, ...]
    order_by: str


LOOKUP_TABLES = (
    LookupTable(
        "member-types",
        "mst_member_type",
        ("member_type_id", "member_type_name", "loan_limit", "loan_periode"),
        "member_type_id",
    ),
    LookupTable("coll-types", "mst_coll_type", ("coll_type_id", "coll_type_name"), "coll_type_id"),
    LookupTable("locations", "mst_location", ("location_id", "location_name"), "location_id"),
    LookupTable("languages", "mst_language", ("language_id", "language_name"), "language_id"),
    LookupTable("gmd", "mst_gmd", ("gmd_id", "gmd_code", "gmd_name"), "gmd_id"),
    LookupTable(
        "item-statuses",
        "mst_item_status",
        ("item_status_id", "item_status_name", "no_loan"),
        "item_status_id",
    ),
    LookupTable(
        "frequencies",
        "mst_frequency",
        ("frequency_id", "frequency", "language_prefix"),
        "frequency_id",
    ),
    LookupTable(
        "modules",
        "mst_module",
        ("module_id", "module_name", "module_path", "module_desc"),
        "module_id",
    ),
    LookupTable("places", "mst_place", ("place_id", "place_name"), "place_id"),
    LookupTable("publishers", "mst_publisher", ("publisher_id", "publisher_name"), "publisher_id"),
    LookupTable("suppliers", "mst_supplier", ("supplier_id", "supplier_name"), "supplier_id"),
    LookupTable("topics", "mst_topic", ("topic_id", "topic", "topic_type"), "topic_id"),
    LookupTable("content-types", "mst_content_type", ("id", "content_type", "code"), "id"),
    LookupTable("media-types", "mst_media_type", ("id", "media_type", "code"), "id"),
    LookupTable("carrier-types", "mst_carrier_type", ("id", "carrier_type", "code"), "id"),
    LookupTable("relation-terms", "mst_relation_term", ("rt_id", "rt_desc"), "rt_id"),
    LookupTable(
        "loan-rules",
        "mst_loan_rules",
        ("loan_rules_id", "member_type_id", "coll_type_id", "loan_limit", "loan_periode"),
        "loan_rules_id",
    ),
)

router = APIRouter(prefix="/lookups", tags=["lookups"])


def _register(lookup: LookupTable) -> None:
    async def list_lookup(
        params: ListParams = Depends(get_list_params),
        executor: QueryExecutor = Depends(get_executor),
    ) -> PagedResponse:
        return await list_table(
            executor, lookup.table, lookup.columns, lookup.order_by, params.pagination()
        )

    router.add_api_route(
        f"/{lookup.path}",
        list_lookup,
        methods=["GET"],
        name=f"list_{lookup.table}",
        summary=f"List {lookup.path.replace('-', ' ')}",
    )


for _lookup in LOOKUP_TABLES:
    _register(_lookup)
