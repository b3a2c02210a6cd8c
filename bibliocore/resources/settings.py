"""
System settings.

Only the raw stored value is exposed; values keep whatever encoding the
deployment stored them in.
"""

from typing import Any, Dict, Mapping

from fastapi import APIRouter, Depends

from bibliocore.api import ListParams, QueryExecutor, get_list_params
from bibliocore.resources.common import get_executor
from bibliocore.schemas import (
    collection_document,
    pagination_meta,
    resource_with_fields,
    single_document,
)

SETTING_COLUMNS = "setting_id, setting_name, setting_value"


def setting_resource(row: Mapping[str, Any], params: ListParams) -> Dict[str, Any]:
    attributes = {
        "setting_name": row["setting_name"],
        "raw_value": row["setting_value"],
    }
    return resource_with_fields(
        "settings", row["setting_name"], attributes, params.fieldset("settings")
    )


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
async def list_settings(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """List settings ordered by name."""
    pagination = params.pagination()
    total, rows = await executor.fetch_page(
        "SELECT COUNT(*) FROM setting",
        f"SELECT {SETTING_COLUMNS} FROM setting ORDER BY setting_name LIMIT ? OFFSET ?",
        (),
        pagination,
    )
    data = [setting_resource(row, params) for row in rows]
    return collection_document(data, pagination_meta(pagination.page, pagination.size, total))


@router.get("/{setting_name}")
async def get_setting(
    setting_name: str,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    row = await executor.fetch_one(
        f"SELECT {SETTING_COLUMNS} FROM setting WHERE setting_name = ?",
        setting_name,
        resource_type="settings",
    )
    return single_document(setting_resource(row, params))
