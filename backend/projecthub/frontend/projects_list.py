"""Project list view — schema-driven table of hub_projects with edit/delete.

On mount the view fetches the column schema and the project rows
concurrently. The schema decides which columns are shown; if it fails or is
empty a fixed field list is used instead. Create and edit are handed to
caller-supplied callbacks. Delete asks for confirmation, then reloads.

Every request captures a lifetime token first; results arriving after
unmount() are dropped, and an older records load never overwrites a newer
one.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from projecthub.frontend.api_client import ApiError, ProjectsApiClient, error_message
from projecthub.frontend.lifetime import LatestRequest, Lifetime

logger = structlog.stdlib.get_logger(__name__)

PROJECTS_TABLE = "hub_projects"
PROJECT_PRIMARY_KEY = "hub_project_id"

FALLBACK_FIELDS = ("name", "description", "address", "borough", "latitude", "longitude")

# Never shown as data columns: the row identifier has its own column
IDENTIFIER_FIELDS = ("id", PROJECT_PRIMARY_KEY)

Callback = Callable[..., Any]
Confirm = Callable[[str], bool | Awaitable[bool]]


async def _call(callback: Callback | None, *args: Any) -> Any:
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def column_label(field_name: str) -> str:
    return field_name.replace("_", " ").upper()


def record_id(record: dict[str, Any]) -> Any:
    return record.get("id") or record.get(PROJECT_PRIMARY_KEY)


def fields_from_columns(payload: dict[str, Any]) -> list[str]:
    """Column names minus the primary key, or the fallback list if there are none."""
    columns = payload.get("columns") or []
    if not columns:
        return list(FALLBACK_FIELDS)
    return [
        c["column_name"] for c in columns if c["column_name"] != PROJECT_PRIMARY_KEY
    ]


@dataclass
class TableRow:
    record_id: Any
    cells: list[Any]
    record: dict[str, Any]


@dataclass
class ProjectsTable:
    headers: list[str]
    fields: list[str]
    rows: list[TableRow] = field(default_factory=list)


class ProjectsListView:
    def __init__(
        self,
        client: ProjectsApiClient,
        *,
        on_edit: Callback | None = None,
        on_create: Callback | None = None,
        on_change: Callback | None = None,
        confirm: Confirm | None = None,
    ):
        self._client = client
        self._on_edit = on_edit
        self._on_create = on_create
        self._on_change = on_change
        # Without a confirmation prompt, deletes are declined
        self._confirm = confirm

        self.projects: list[dict[str, Any]] = []
        self.fields: list[str] | None = None
        self.loading = True
        self.error: str | None = None

        self._lifetime = Lifetime()
        self._loads = LatestRequest(self._lifetime)

    async def mount(self) -> None:
        await asyncio.gather(self.load_schema(), self.load())

    def unmount(self) -> None:
        self._lifetime.end()

    async def load_schema(self) -> None:
        token = self._lifetime.token()
        try:
            fields = fields_from_columns(await self._client.get_columns(PROJECTS_TABLE))
        except (ApiError, KeyError, TypeError) as exc:
            logger.warning("schema_fetch_failed_using_fallback", error=str(exc))
            fields = list(FALLBACK_FIELDS)
        if token.alive:
            self.fields = fields

    async def load(self) -> None:
        ticket = self._loads.begin()
        self.loading = True
        self.error = None
        try:
            payload = await self._client.list_projects()
        except ApiError as exc:
            logger.error("projects_load_failed", error=str(exc))
            if ticket.current:
                self.error = error_message(exc, "Failed to load projects")
        else:
            if ticket.current:
                self.projects = payload.get("data") or []
                self.error = None
        finally:
            if ticket.current:
                self.loading = False

    async def delete(self, record: dict[str, Any]) -> bool:
        """Delete after confirmation. Returns True when the project was deleted."""
        label = record.get("name") or record_id(record)
        if self._confirm is None or not await _call(
            self._confirm, f'Delete project "{label}"?'
        ):
            return False

        token = self._lifetime.token()
        try:
            await self._client.delete_project(record_id(record))
        except ApiError as exc:
            logger.error("project_delete_failed", record_id=record_id(record), error=str(exc))
            if token.alive:
                self.error = error_message(exc, "Failed to delete project")
            return False

        if token.alive:
            await self.load()
            await _call(self._on_change)
        return True

    async def create(self) -> None:
        await _call(self._on_create)

    async def edit(self, record: dict[str, Any]) -> None:
        await _call(self._on_edit, record)

    def dismiss_error(self) -> None:
        self.error = None

    def find(self, project_id: Any) -> dict[str, Any] | None:
        for record in self.projects:
            if str(record_id(record)) == str(project_id):
                return record
        return None

    @property
    def visible_fields(self) -> list[str]:
        return [f for f in (self.fields or []) if f not in IDENTIFIER_FIELDS]

    def render(self) -> ProjectsTable:
        fields = self.visible_fields
        return ProjectsTable(
            headers=["ID", *(column_label(f) for f in fields), "Actions"],
            fields=fields,
            rows=[
                TableRow(
                    record_id=record_id(record),
                    cells=[record.get(f) for f in fields],
                    record=record,
                )
                for record in self.projects
            ],
        )
