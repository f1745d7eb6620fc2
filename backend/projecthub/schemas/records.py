"""Pydantic schemas for record CRUD endpoints.

Rows are schema-less dicts: columns come from the live table, not from a model.
"""

from typing import Any

from pydantic import BaseModel


class RecordResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class RecordListResponse(BaseModel):
    success: bool = True
    data: list[dict[str, Any]]


class RecordPageResponse(RecordListResponse):
    """Paginated listing for the generic table endpoints."""

    count: int
    limit: int
    offset: int
    count_estimated: bool = False


class SuccessResponse(BaseModel):
    success: bool = True


class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str]
