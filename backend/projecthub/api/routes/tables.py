"""Generic table CRUD endpoints.

Any table in the public schema can be listed and edited by name. Writes go
through the enum validator first.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from projecthub.api.deps import get_record_store
from projecthub.core.config import settings
from projecthub.schemas.records import RecordPageResponse, RecordResponse, SuccessResponse
from projecthub.services.record_store import RecordStore

router = APIRouter()


@router.get("/{table_name}", response_model=RecordPageResponse)
async def list_table_records(
    table_name: str,
    limit: int = Query(settings.default_page_limit, ge=1),
    offset: int = Query(0, ge=0),
    q: str | None = None,
    fast_count: bool = Query(False, alias="fastCount"),
    store: RecordStore = Depends(get_record_store),
):
    page = await store.list_records(
        table_name, limit=limit, offset=offset, q=q, fast_count=fast_count
    )
    return RecordPageResponse(
        data=page.rows,
        count=page.count,
        limit=page.limit,
        offset=page.offset,
        count_estimated=page.count_estimated,
    )


@router.post("/{table_name}", response_model=RecordResponse)
async def insert_table_record(
    table_name: str,
    data: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_record_store),
):
    return RecordResponse(data=await store.insert(table_name, data))


@router.put("/{table_name}/{record_id}", response_model=RecordResponse)
async def update_table_record(
    table_name: str,
    record_id: str,
    data: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_record_store),
):
    return RecordResponse(data=await store.update(table_name, record_id, data))


@router.delete("/{table_name}/{record_id}", response_model=SuccessResponse)
async def delete_table_record(
    table_name: str,
    record_id: str,
    store: RecordStore = Depends(get_record_store),
):
    await store.delete(table_name, record_id)
    return SuccessResponse()
