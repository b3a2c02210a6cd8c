"""
Uploaded files and the records they are attached to.
"""

from fastapi import APIRouter, Depends

from bibliocore.api import (
    CollectionRelation,
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

FILES = ResourceDefinition(
    type="files",
    table="files",
    columns=(
        "file_id",
        "file_title",
        "file_name",
        "file_url",
        "file_dir",
        "mime_type",
        "file_desc",
        "file_key",
        "uploader_id",
        "input_date",
        "last_update",
    ),
    id_column="file_id",
    default_sort="files.file_id DESC",
    sorts=(
        SortField("file_id", "files.file_id"),
        SortField("file_title", "files.file_title"),
        SortField("input_date", "files.input_date"),
    ),
    filters=(
        FilterField("file_title", "files.file_title", FilterOperator.LIKE),
        FilterField("mime_type", "files.mime_type"),
    ),
    relations=(
        CollectionRelation(
            "biblios",
            "file_id",
            "SELECT ba.biblio_id, b.title, ba.placement, ba.access_type, ba.access_limit "
            "FROM biblio_attachment ba JOIN biblio b ON b.biblio_id = ba.biblio_id "
            "WHERE ba.file_id = ?",
        ),
    ),
)

router = APIRouter(prefix="/files", tags=["files"])


@router.get("")
async def list_files(
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    """
    List files.

    Include: ``biblios``.
    """
    return await list_resources(FILES, params, executor)


@router.get("/{file_id}")
async def get_file(
    file_id: int,
    params: ListParams = Depends(get_list_params),
    executor: QueryExecutor = Depends(get_executor),
):
    return await read_resource(FILES, params, executor, file_id)
