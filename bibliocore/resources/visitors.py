"""
Visitor check-ins.
"""

from fastapi import APIRouter, Depends

from bibliocore.api import (
    FilterField,
    FilterOperator,
    ListParams,
    QueryExecutor,
    SortField,
    get_list_params,
)
from bibliocore.resources.common import (
    ResourceDefinition,
    get_executor,
    list_resources,
    read_resource,
)

VISITORS = ResourceDefinition(
    type="visitors",
    table="visitor_count",
    columns=("visitor_id", "member_id", "member_name", "institution", "checkin_date"),
    id_column="visitor_id",
    default_sort="visitor_count.checkin_date DESC",
    sorts=(
        SortField("visitor_id", "visitor_count.visitor_id"),
        SortField("checkin_date", "visitor_count.checkin_date"),
        SortField("member_name", "visitor_count.member_name"),
    ),
    filters=(
        FilterField("member_id", "visitor_count.member_id"),
        FilterField("member_name", "visitor_count.member_name", FilterOperator.LIKE),
        FilterField("institution", "visitor_count.institution", FilterOperator.LIKE),
    ),
)

router = APIRouter(prefix="/visitors", tags=["visitors"])


@router.get("")
async def list_visitors(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await list_resources(VISITORS, params, executor)


@router.get("/{visitor_id}")
async def get_visitor(
    visitor_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(VISITORS, params, executor, visitor_id)
