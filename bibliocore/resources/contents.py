"""
OPAC content pages and news.
"""

from fastapi import APIRouter, Depends

from bibliocore.api import (
    FilterField,
    FilterOperator,
    FilterValueType,
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

CONTENTS = ResourceDefinition(
    type="contents",
    table="content",
    columns=(
        "content_id",
        "content_title",
        "content_desc",
        "content_path",
        "is_news",
        "input_date",
        "last_update",
        "content_ownpage",
    ),
    id_column="content_id",
    default_sort="content.content_id DESC",
    sorts=(
        SortField("content_id", "content.content_id"),
        SortField("content_title", "content.content_title"),
        SortField("input_date", "content.input_date"),
    ),
    filters=(
        FilterField("content_title", "content.content_title", FilterOperator.LIKE),
        FilterField("is_news", "content.is_news", value_type=FilterValueType.BOOLEAN),
    ),
)

router = APIRouter(prefix="/contents", tags=["contents"])


@router.get("")
async def list_contents(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await list_resources(CONTENTS, params, executor)


@router.get("/path/{content_path:path}")
async def get_content_by_path(
    content_path: str,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(CONTENTS, params, executor, content_path, "content_path")


@router.get("/{content_id}")
async def get_content(
    content_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(CONTENTS, params, executor, content_id)
