"""Schema catalog endpoints.

Exposes live table metadata to the frontend: table names, columns (with enum
labels) and per-table enum maps, plus a dry-run of the enum validator.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from projecthub.api.deps import get_record_store, get_schema_catalog
from projecthub.schemas.records import ValidationResponse
from projecthub.schemas.schema import ColumnsResponse, EnumsResponse, TablesResponse
from projecthub.services.record_store import RecordStore
from projecthub.services.schema_catalog import SchemaCatalog

router = APIRouter()


@router.get("/tables", response_model=TablesResponse)
async def list_tables(catalog: SchemaCatalog = Depends(get_schema_catalog)):
    return TablesResponse(tables=await catalog.list_tables())


@router.get(
    "/columns/{table_name}",
    response_model=ColumnsResponse,
    response_model_exclude_none=True,
)
async def get_columns(
    table_name: str,
    catalog: SchemaCatalog = Depends(get_schema_catalog),
):
    """Columns in ordinal order. Unknown tables return an empty list.

    The project list UI derives its field list from this response.
    """
    return ColumnsResponse(columns=await catalog.get_columns(table_name))


@router.get("/enums/{table_name}", response_model=EnumsResponse)
async def get_enums(
    table_name: str,
    refresh: bool = False,
    catalog: SchemaCatalog = Depends(get_schema_catalog),
):
    return EnumsResponse(
        enums=await catalog.get_enum_map(table_name, force_refresh=refresh)
    )


@router.post("/validate/{table_name}", response_model=ValidationResponse)
async def validate_record(
    table_name: str,
    data: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_record_store),
):
    """Check a record against the table's enum catalog without writing it."""
    result = await store.validate(table_name, data)
    return ValidationResponse(valid=result.valid, errors=result.errors)
