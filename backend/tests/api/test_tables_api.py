"""Generic table endpoint tests with a mocked RecordStore."""

from httpx import AsyncClient

from projecthub.services.errors import (
    EmptyPayloadError,
    InvalidTableName,
    RecordNotFound,
    UnknownColumnError,
)
from projecthub.services.record_store import RecordPage


async def test_list_records_passes_paging_and_search(client: AsyncClient, record_store):
    record_store.list_records.return_value = RecordPage(
        rows=[{"hub_site_id": 1, "site_name": "Pier 17"}],
        count=1,
        limit=10,
        offset=20,
        count_estimated=True,
    )

    resp = await client.get("/api/table/hub_sites?limit=10&offset=20&q=pier&fastCount=true")

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "data": [{"hub_site_id": 1, "site_name": "Pier 17"}],
        "count": 1,
        "limit": 10,
        "offset": 20,
        "count_estimated": True,
    }
    record_store.list_records.assert_awaited_once_with(
        "hub_sites", limit=10, offset=20, q="pier", fast_count=True
    )


async def test_list_records_rejects_negative_offset(client: AsyncClient):
    resp = await client.get("/api/table/hub_sites?offset=-1")
    assert resp.status_code == 422
    assert "offset" in resp.json()["error"]


async def test_list_records_invalid_table(client: AsyncClient, record_store):
    record_store.list_records.side_effect = InvalidTableName("hub-sites")
    resp = await client.get("/api/table/hub-sites")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid table name"}


async def test_insert_record(client: AsyncClient, record_store):
    record_store.insert.return_value = {"hub_site_id": 2, "site_name": "Pier 40"}
    resp = await client.post("/api/table/hub_sites", json={"site_name": "Pier 40"})
    assert resp.status_code == 200
    assert resp.json()["data"] == {"hub_site_id": 2, "site_name": "Pier 40"}
    record_store.insert.assert_awaited_once_with("hub_sites", {"site_name": "Pier 40"})


async def test_insert_unknown_column(client: AsyncClient, record_store):
    record_store.insert.side_effect = UnknownColumnError("hub_sites", ["colour"])
    resp = await client.post("/api/table/hub_sites", json={"colour": "red"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown column(s) for hub_sites: colour"}


async def test_insert_empty_payload(client: AsyncClient, record_store):
    record_store.insert.side_effect = EmptyPayloadError("No data provided")
    resp = await client.post("/api/table/hub_sites", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No data provided"}


async def test_update_record(client: AsyncClient, record_store):
    record_store.update.return_value = {"hub_site_id": 2, "site_name": "Pier 45"}
    resp = await client.put("/api/table/hub_sites/2", json={"site_name": "Pier 45"})
    assert resp.status_code == 200
    record_store.update.assert_awaited_once_with("hub_sites", "2", {"site_name": "Pier 45"})


async def test_update_missing_record(client: AsyncClient, record_store):
    record_store.update.side_effect = RecordNotFound("Record not found")
    resp = await client.put("/api/table/hub_sites/99", json={"site_name": "x"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Record not found"}


async def test_delete_record(client: AsyncClient, record_store):
    resp = await client.delete("/api/table/hub_sites/2")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    record_store.delete.assert_awaited_once_with("hub_sites", "2")
