"""
Library members.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from bibliocore.api import (
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
from bibliocore.resources.common import (
    ResourceDefinition,
    create_resource,
    delete_resource,
    get_executor,
    list_resources,
    read_resource,
    update_resource,
)

MEMBER_SORTS = (
    SortField("member_id", "member.member_id"),
    SortField("member_name", "member.member_name"),
    SortField("expire_date", "member.expire_date"),
    SortField("register_date", "member.register_date"),
)

MEMBER_FILTERS = (
    FilterField("member_id", "member.member_id"),
    FilterField("member_name", "member.member_name", FilterOperator.LIKE),
    FilterField("member_email", "member.member_email"),
    FilterField(
        "member_type_id", "member.member_type_id", value_type=FilterValueType.INTEGER
    ),
    FilterField("is_pending", "member.is_pending", value_type=FilterValueType.BOOLEAN),
)

MEMBER_RELATIONS = (
    LookupRelation(
        "member_type",
        "member_type_id",
        "SELECT member_type_id, member_type_name, loan_limit, loan_periode "
        "FROM mst_member_type WHERE member_type_id = ?",
    ),
    CustomRelation("member_id", "SELECT * FROM member_custom WHERE member_id = ?"),
)

MEMBERS = ResourceDefinition(
    type="members",
    table="member",
    columns=(
        "member_id",
        "member_name",
        "member_email",
        "member_type_id",
        "expire_date",
        "is_pending",
    ),
    id_column="member_id",
    default_sort="member.register_date DESC",
    sorts=MEMBER_SORTS,
    filters=MEMBER_FILTERS,
    relations=MEMBER_RELATIONS,
)


class MemberPayload(BaseModel):
    """Member fields accepted on create and update."""

    member_id: str = Field(..., min_length=1, max_length=20)
    member_name: str = Field(..., min_length=1, max_length=100)
    gender: Optional[int] = None
    member_email: Optional[str] = Field(None, max_length=100)
    member_type_id: Optional[int] = None
    expire_date: date


router = APIRouter(prefix="/members", tags=["members"])


@router.get("")
async def list_members(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List members.

    Include: ``member_type``, ``custom``.
    """
    return await list_resources(MEMBERS, params, executor)


@router.get("/{member_id}")
async def get_member(
    member_id: str,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(MEMBERS, params, executor, member_id)


@router.post("", status_code=201)
async def create_member(
    payload: MemberPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """Register a member; membership starts today and is not pending."""
    return await create_resource(
        MEMBERS,
        params,
        executor,
        {**payload.model_dump(), "is_pending": 0},
        stamps={"register_date": "CURRENT_DATE", "member_since_date": "CURRENT_DATE"},
        key=payload.member_id,
    )


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    payload: MemberPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await update_resource(
        MEMBERS,
        params,
        executor,
        member_id,
        payload.model_dump(),
        stamps={"last_update": "CURRENT_DATE"},
        key=payload.member_id,
    )


@router.delete("/{member_id}", status_code=204, response_class=Response)
async def delete_member(
    member_id: str,
    executor: QueryExecutor = Depends(get_executor),
):
    await delete_resource(MEMBERS, executor, member_id)
    return Response(status_code=204)
