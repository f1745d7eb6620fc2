"""Pydantic schemas for the table / column catalog endpoints."""

from pydantic import BaseModel


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    udt_name: str | None = None
    # Only set for USER-DEFINED enum columns, in enumsortorder
    enum_values: list[str] | None = None


class ColumnsResponse(BaseModel):
    success: bool = True
    columns: list[ColumnInfo]


class TablesResponse(BaseModel):
    success: bool = True
    tables: list[str]


class EnumsResponse(BaseModel):
    success: bool = True
    enums: dict[str, list[str]]
