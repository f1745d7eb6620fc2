"""Server-rendered project pages.

Each request mounts a fresh ProjectsListView, renders it through Jinja2 and
unmounts it. Create and edit forms are built from the columns endpoint, with
enum columns rendered as selects.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from projecthub.frontend.api_client import ApiError, ProjectsApiClient, error_message
from projecthub.frontend.projects_list import (
    FALLBACK_FIELDS,
    PROJECT_PRIMARY_KEY,
    PROJECTS_TABLE,
    ProjectsListView,
    column_label,
)

logger = structlog.stdlib.get_logger("projecthub.pages")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()

# Read-only in forms: identifiers and the database-generated GUID
EXCLUDED_FORM_FIELDS = ("id", PROJECT_PRIMARY_KEY, "hub_project_guid")


@dataclass
class FormField:
    name: str
    label: str
    enum_values: list[str] | None = None
    value: Any = None


def get_projects_api(request: Request) -> ProjectsApiClient:
    """Return the backend API client from app state."""
    return request.app.state.projects_api


async def _form_fields(
    api: ProjectsApiClient, values: dict[str, Any] | None = None
) -> list[FormField]:
    values = values or {}
    try:
        columns = (await api.get_columns(PROJECTS_TABLE)).get("columns") or []
    except ApiError as exc:
        logger.warning("form_schema_fetch_failed_using_fallback", error=str(exc))
        columns = []
    if not columns:
        columns = [{"column_name": name} for name in FALLBACK_FIELDS]
    return [
        FormField(
            name=c["column_name"],
            label=column_label(c["column_name"]),
            enum_values=c.get("enum_values"),
            value=values.get(c["column_name"]),
        )
        for c in columns
        if c["column_name"] not in EXCLUDED_FORM_FIELDS
    ]


async def _submitted(request: Request, fields: list[FormField], keep_blank: bool) -> dict[str, Any]:
    """Form values keyed by field. Blank inputs are dropped, or sent as null."""
    form = await request.form()
    data: dict[str, Any] = {}
    for f in fields:
        raw = form.get(f.name)
        value = raw.strip() if isinstance(raw, str) else None
        if value:
            data[f.name] = value
        elif keep_blank:
            data[f.name] = None
    return data


async def _list_page(
    request: Request, view: ProjectsListView, status_code: int = 200
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "projects_list.html",
        {"view": view, "table": view.render()},
        status_code=status_code,
    )


@router.get("/", include_in_schema=False)
async def index():
    return RedirectResponse("/projects")


@router.get("/projects", response_class=HTMLResponse)
async def projects_list(
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    view = ProjectsListView(api)
    try:
        await view.mount()
        return await _list_page(request, view)
    finally:
        view.unmount()


@router.get("/projects/{project_id}/delete", response_class=HTMLResponse)
async def confirm_delete(
    project_id: str,
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    view = ProjectsListView(api)
    try:
        await view.load()
        record = view.find(project_id) or {"id": project_id}
    finally:
        view.unmount()
    label = record.get("name") or project_id
    return templates.TemplateResponse(
        request,
        "confirm_delete.html",
        {"project_id": project_id, "message": f'Delete project "{label}"?', "error": view.error},
    )


@router.post("/projects/{project_id}/delete", response_class=HTMLResponse)
async def delete_project(
    project_id: str,
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    form = await request.form()

    view = ProjectsListView(
        api,
        confirm=lambda _message: form.get("confirm") == "yes",
        on_change=lambda: logger.info("project_deleted", project_id=project_id),
    )
    try:
        await view.mount()
        record = view.find(project_id) or {"id": project_id}
        await view.delete(record)
        if view.error is None:
            return RedirectResponse("/projects", status_code=303)
        # Failed delete: list as it was, with the error banner
        return await _list_page(request, view, status_code=502)
    finally:
        view.unmount()


@router.get("/projects/new", response_class=HTMLResponse)
async def new_project_form(
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    return templates.TemplateResponse(
        request,
        "project_form.html",
        {"title": "New Project", "action": "/projects/new", "fields": await _form_fields(api), "error": None},
    )


@router.post("/projects/new", response_class=HTMLResponse)
async def create_project(
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    fields = await _form_fields(api)
    data = await _submitted(request, fields, keep_blank=False)
    try:
        await api.create_project(data)
    except ApiError as exc:
        for f in fields:
            f.value = data.get(f.name)
        return templates.TemplateResponse(
            request,
            "project_form.html",
            {
                "title": "New Project",
                "action": "/projects/new",
                "fields": fields,
                "error": error_message(exc, "Failed to create project"),
            },
            status_code=exc.status_code or 502,
        )
    return RedirectResponse("/projects", status_code=303)


@router.get("/projects/{project_id}/edit", response_class=HTMLResponse)
async def edit_project_form(
    project_id: str,
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    try:
        project = (await api.get_project(project_id)).get("data") or {}
    except ApiError as exc:
        return templates.TemplateResponse(
            request,
            "project_form.html",
            {
                "title": "Edit Project",
                "action": f"/projects/{project_id}/edit",
                "fields": [],
                "error": error_message(exc, "Failed to load project"),
            },
            status_code=exc.status_code or 502,
        )
    return templates.TemplateResponse(
        request,
        "project_form.html",
        {
            "title": "Edit Project",
            "action": f"/projects/{project_id}/edit",
            "fields": await _form_fields(api, project),
            "error": None,
        },
    )


@router.post("/projects/{project_id}/edit", response_class=HTMLResponse)
async def update_project(
    project_id: str,
    request: Request,
    api: ProjectsApiClient = Depends(get_projects_api),
):
    fields = await _form_fields(api)
    data = await _submitted(request, fields, keep_blank=True)
    try:
        await api.update_project(project_id, data)
    except ApiError as exc:
        for f in fields:
            f.value = data.get(f.name)
        return templates.TemplateResponse(
            request,
            "project_form.html",
            {
                "title": "Edit Project",
                "action": f"/projects/{project_id}/edit",
                "fields": fields,
                "error": error_message(exc, "Failed to update project"),
            },
            status_code=exc.status_code or 502,
        )
    return RedirectResponse("/projects", status_code=303)
