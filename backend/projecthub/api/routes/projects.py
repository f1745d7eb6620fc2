"""Project CRUD endpoints over hub_projects."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from projecthub.api.deps import get_project_store
from projecthub.schemas.records import RecordListResponse, RecordResponse, SuccessResponse
from projecthub.services.project_store import ProjectStore

router = APIRouter()


@router.get("", response_model=RecordListResponse)
async def list_projects(store: ProjectStore = Depends(get_project_store)):
    return RecordListResponse(data=await store.list_projects())


@router.get("/{project_id}", response_model=RecordResponse)
async def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
):
    return RecordResponse(data=await store.get_project(project_id))


@router.post("", response_model=RecordResponse)
async def create_project(
    data: dict[str, Any] = Body(...),
    store: ProjectStore = Depends(get_project_store),
):
    return RecordResponse(data=await store.create_project(data))


@router.put("/{project_id}", response_model=RecordResponse)
async def update_project(
    project_id: str,
    data: dict[str, Any] = Body(...),
    store: ProjectStore = Depends(get_project_store),
):
    return RecordResponse(data=await store.update_project(project_id, data))


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
):
    """Delete a project and its site links."""
    await store.delete_project(project_id)
    return SuccessResponse()
