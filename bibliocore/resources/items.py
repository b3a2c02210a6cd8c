"""
Physical items (copies) of bibliographic records.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from bibliocore.api import (
    FilterField,
    FilterOperator,
    FilterValueType,
    ListParams,
    LookupRelation,
    QueryExecutor,
    SortField,
    get_list_params,
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

ITEM_SORTS = (
    SortField("item_id", "item.item_id"),
    SortField("item_code", "item.item_code"),
    SortField("call_number", "item.call_number"),
    SortField("last_update", "item.last_update"),
)

ITEM_FILTERS = (
    FilterField("item_code", "item.item_code"),
    FilterField("biblio_id", "item.biblio_id", value_type=FilterValueType.INTEGER),
    FilterField("call_number", "item.call_number", FilterOperator.LIKE),
    FilterField("coll_type_id", "item.coll_type_id", value_type=FilterValueType.INTEGER),
    FilterField("location_id", "item.location_id"),
    FilterField("item_status_id", "item.item_status_id"),
)

ITEM_RELATIONS = (
    LookupRelation(
        "biblio", "biblio_id", "SELECT biblio_id, title FROM biblio WHERE biblio_id = ?"
    ),
    LookupRelation(
        "coll_type",
        "coll_type_id",
        "SELECT coll_type_id, coll_type_name FROM mst_coll_type WHERE coll_type_id = ?",
    ),
    LookupRelation(
        "location",
        "location_id",
        "SELECT location_id, location_name FROM mst_location WHERE location_id = ?",
    ),
    LookupRelation(
        "item_status",
        "item_status_id",
        "SELECT item_status_id, item_status_name, no_loan "
        "FROM mst_item_status WHERE item_status_id = ?",
    ),
)

ITEMS = ResourceDefinition(
    type="items",
    table="item",
    columns=(
        "item_id",
        "item_code",
        "biblio_id",
        "call_number",
        "coll_type_id",
        "location_id",
        "item_status_id",
        "last_update",
    ),
    id_column="item_id",
    default_sort="item.item_id DESC",
    sorts=ITEM_SORTS,
    filters=ITEM_FILTERS,
    relations=ITEM_RELATIONS,
)


class ItemPayload(BaseModel):
    """Item fields accepted on create and update; all optional."""

    item_code: Optional[str] = Field(None, max_length=20)
    biblio_id: Optional[int] = None
    call_number: Optional[str] = Field(None, max_length=50)
    coll_type_id: Optional[int] = None
    location_id: Optional[str] = Field(None, max_length=3)
    item_status_id: Optional[str] = Field(None, max_length=3)


router = APIRouter(prefix="/items", tags=["items"])


@router.get("")
async def list_items(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List items.

    Include: ``biblio``, ``coll_type``, ``location``, ``item_status``.
    """
    return await list_resources(ITEMS, params, executor)


@router.get("/{item_id}")
async def get_item(
    item_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(ITEMS, params, executor, item_id)


@router.post("", status_code=201)
async def create_item(
    payload: ItemPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await create_resource(
        ITEMS,
        params,
        executor,
        payload.model_dump(),
        stamps={"input_date": "CURRENT_TIMESTAMP", "last_update": "CURRENT_TIMESTAMP"},
    )


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    payload: ItemPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await update_resource(
        ITEMS,
        params,
        executor,
        item_id,
        payload.model_dump(),
        stamps={"last_update": "CURRENT_TIMESTAMP"},
    )


@router.delete("/{item_id}", status_code=204, response_class=Response)
async def delete_item(
    item_id: int,
    executor: QueryExecutor = Depends(get_executor),
):
    await delete_resource(ITEMS, executor, item_id)
    return Response(status_code=204)
