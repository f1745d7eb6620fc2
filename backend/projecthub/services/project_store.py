"""Project store — the hub_projects table and its dependent link rows.

Project rows are returned with an ``id`` alias of ``hub_project_id`` so the
UI can treat every record the same way.
"""

from typing import Any

from sqlalchemy import text

from projecthub.services.errors import EmptyPayloadError, RecordNotFound
from projecthub.services.record_store import RecordStore

PROJECTS_TABLE = "hub_projects"
PROJECT_PRIMARY_KEY = "hub_project_id"

# Never written through the API: the id alias and the database-generated GUID
READ_ONLY_FIELDS = ("id", "hub_project_guid")

# Rows referencing a project, removed before the project itself. The link
# table may lack ON DELETE CASCADE, and the attribute table may not exist.
DEPENDENT_TABLES = ("lnk_project_site", "sat_project_site_attributes")


def with_id_alias(row: dict[str, Any]) -> dict[str, Any]:
    return {**row, "id": row.get(PROJECT_PRIMARY_KEY)}


class ProjectStore(RecordStore):
    async def list_projects(self) -> list[dict[str, Any]]:
        result = await self._db.execute(
            text(f"SELECT * FROM {PROJECTS_TABLE} ORDER BY {PROJECT_PRIMARY_KEY}")
        )
        return [with_id_alias(dict(row)) for row in result.mappings().all()]

    async def get_project(self, project_id: str) -> dict[str, Any]:
        try:
            row = await self.get(PROJECTS_TABLE, project_id, PROJECT_PRIMARY_KEY)
        except RecordNotFound:
            raise RecordNotFound("Project not found") from None
        return with_id_alias(row)

    async def create_project(self, data: dict[str, Any]) -> dict[str, Any]:
        # A caller-supplied hub_project_guid is kept; the database default fills it otherwise
        data = {k: v for k, v in data.items() if k != "id"}
        row = await self.insert(PROJECTS_TABLE, data)
        return with_id_alias(row)

    async def update_project(
        self, project_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        pk = await self._catalog.get_primary_key(PROJECTS_TABLE) or PROJECT_PRIMARY_KEY
        update_data = {
            k: v for k, v in data.items() if k != pk and k not in READ_ONLY_FIELDS
        }
        if not update_data:
            raise EmptyPayloadError("No updatable fields provided")
        try:
            row = await self.update(PROJECTS_TABLE, project_id, update_data, pk)
        except RecordNotFound:
            raise RecordNotFound("Project not found") from None
        return with_id_alias(row)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project after removing the rows that reference it."""
        tables = await self._catalog.list_tables()
        for dependent in DEPENDENT_TABLES:
            if dependent not in tables:
                continue
            await self._db.execute(
                text(
                    f"DELETE FROM {dependent} "
                    f"WHERE CAST({PROJECT_PRIMARY_KEY} AS text) = :project_id"
                ),
                {"project_id": str(project_id)},
            )
        try:
            await self.delete(PROJECTS_TABLE, project_id, PROJECT_PRIMARY_KEY)
        except RecordNotFound:
            raise RecordNotFound("Project not found") from None
