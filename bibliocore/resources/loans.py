"""
Loans of items to members.
"""

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bibliocore.api import (
    FilterField,
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
    get_executor,
    list_resources,
    read_resource,
    update_resource,
)

LOAN_SORTS = (
    SortField("loan_id", "loan.loan_id"),
    SortField("loan_date", "loan.loan_date"),
    SortField("due_date", "loan.due_date"),
    SortField("return_date", "loan.return_date"),
)

LOAN_FILTERS = (
    FilterField("member_id", "loan.member_id"),
    FilterField("item_code", "loan.item_code"),
    FilterField("is_return", "loan.is_return", value_type=FilterValueType.BOOLEAN),
)

LOAN_RELATIONS = (
    LookupRelation(
        "member",
        "member_id",
        "SELECT member_id, member_name FROM member WHERE member_id = ?",
    ),
    LookupRelation(
        "item", "item_code", "SELECT item_id, item_code FROM item WHERE item_code = ?"
    ),
)

LOANS = ResourceDefinition(
    type="loans",
    table="loan",
    columns=(
        "loan_id",
        "item_code",
        "member_id",
        "loan_date",
        "due_date",
        "actual",
        "return_date",
        "is_return",
    ),
    id_column="loan_id",
    default_sort="loan.loan_date DESC",
    sorts=LOAN_SORTS,
    filters=LOAN_FILTERS,
    relations=LOAN_RELATIONS,
)


class LoanPayload(BaseModel):
    """A new loan of one item to one member, starting today."""

    item_code: str = Field(..., min_length=1, max_length=20)
    member_id: str = Field(..., min_length=1, max_length=20)
    due_date: date


router = APIRouter(prefix="/loans", tags=["loans"])


@router.get("")
async def list_loans(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List loans, most recent first.

    Include: ``member``, ``item``.
    """
    return await list_resources(LOANS, params, executor)


@router.post("", status_code=201)
async def create_loan(
    payload: LoanPayload,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await create_resource(
        LOANS,
        params,
        executor,
        {**payload.model_dump(), "is_lent": 1, "is_return": 0},
        stamps={"loan_date": "CURRENT_DATE"},
    )


@router.get("/{loan_id}")
async def get_loan(
    loan_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(LOANS, params, executor, loan_id)


@router.post("/{loan_id}/return")
async def return_loan(
    loan_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    Mark a loan as returned today.

    Fines and due-date checks are not applied.
    """
    return await update_resource(
        LOANS,
        params,
        executor,
        loan_id,
        {"is_return": 1},
        stamps={"return_date": "CURRENT_DATE", "actual": "CURRENT_DATE"},
    )
