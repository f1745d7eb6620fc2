"""Catalog endpoint tests: tables, columns, enums and validation dry-runs."""

from httpx import AsyncClient

from projecthub.schemas.schema import ColumnInfo
from projecthub.services.enum_validator import ValidationResult
from projecthub.services.errors import InvalidTableName, UnknownTableError


async def test_list_tables(client: AsyncClient, schema_catalog):
    schema_catalog.list_tables.return_value = ["hub_projects", "hub_sites"]
    resp = await client.get("/api/tables")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "tables": ["hub_projects", "hub_sites"]}


async def test_columns_include_enum_values_only_for_enums(client: AsyncClient, schema_catalog):
    schema_catalog.get_columns.return_value = [
        ColumnInfo(column_name="name", data_type="character varying", udt_name="varchar"),
        ColumnInfo(
            column_name="borough",
            data_type="USER-DEFINED",
            udt_name="borough",
            enum_values=["MANHATTAN", "BRONX"],
        ),
    ]

    resp = await client.get("/api/columns/hub_projects")

    assert resp.status_code == 200
    columns = resp.json()["columns"]
    assert "enum_values" not in columns[0]
    assert columns[1]["enum_values"] == ["MANHATTAN", "BRONX"]
    schema_catalog.get_columns.assert_awaited_once_with("hub_projects")


async def test_columns_for_unknown_table_are_empty(client: AsyncClient, schema_catalog):
    schema_catalog.get_columns.return_value = []
    resp = await client.get("/api/columns/nothing_here")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "columns": []}


async def test_columns_invalid_table_name(client: AsyncClient, schema_catalog):
    schema_catalog.get_columns.side_effect = InvalidTableName("bad-name")
    resp = await client.get("/api/columns/bad-name")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid table name"}


async def test_enums(client: AsyncClient, schema_catalog):
    schema_catalog.get_enum_map.return_value = {"borough": ["MANHATTAN"]}
    resp = await client.get("/api/enums/hub_projects?refresh=true")
    assert resp.status_code == 200
    assert resp.json()["enums"] == {"borough": ["MANHATTAN"]}
    schema_catalog.get_enum_map.assert_awaited_once_with("hub_projects", force_refresh=True)


async def test_enums_unknown_table(client: AsyncClient, schema_catalog):
    schema_catalog.get_enum_map.side_effect = UnknownTableError("ghosts")
    resp = await client.get("/api/enums/ghosts")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Table 'ghosts' not found"}


async def test_validate_reports_errors_without_writing(client: AsyncClient, record_store):
    record_store.validate.return_value = ValidationResult(
        valid=False, errors=["Invalid value for borough: X. Allowed values: BRONX"]
    )
    resp = await client.post("/api/validate/hub_projects", json={"borough": "X"})
    assert resp.status_code == 200
    assert resp.json() == {
        "valid": False,
        "errors": ["Invalid value for borough: X. Allowed values: BRONX"],
    }
    record_store.insert.assert_not_awaited()


async def test_unknown_route_uses_error_body(client: AsyncClient):
    resp = await client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}
