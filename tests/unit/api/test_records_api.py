"""Tests for records API: listing, filtering, archive/restore status codes."""

from unittest.mock import AsyncMock

import pytest

from archive_lifecycle.application.document_store import DocumentStoreError


@pytest.fixture
async def seeded(store):
    await store.set(
        "vehicleRegistrations",
        "V1",
        {
            "plateNumber": "ABC 123",
            "make": "Toyota",
            "userId": "U1",
            "userEmail": "ana@example.com",
            "createdAt": "2024-02-01T08:00:00+00:00",
        },
    )
    await store.set("users", "U1", {"firstName": "Ana", "lastName": "Cruz"})
    return store


async def test_list_active(async_client, seeded):
    r = await async_client.get("/records/vehicle-registrations/active")

    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 1
    assert data["state"] == "active"
    assert data["records"][0]["id"] == "V1"
    assert data["records"][0]["display_name"] == "Ana Cruz"


async def test_archive_then_list_archived(async_client, seeded, actor_headers):
    r = await async_client.post("/records/vehicle_registrations/V1/archive", headers=actor_headers)

    assert r.status_code == 200
    body = r.json()
    assert body["outcome"] == "completed"
    assert body["action"] == "archive"
    assert body["duplicate_risk"] is False
    assert body["message"] == "Vehicle registration archived successfully"

    listed = (await async_client.get("/records/vehicle_registrations/archived")).json()
    assert listed["count"] == 1
    record = listed["records"][0]
    assert record["id"] == body["new_record_id"]
    assert record["payload"]["originalId"] == "V1"
    assert record["payload"]["archivedBy"] == "admin-1"
    assert record["display_name"] == "Ana Cruz"


async def test_archived_listing_filters_by_date_and_text(async_client, seeded):
    await async_client.post("/records/vehicle_registrations/V1/archive")

    hit = await async_client.get("/records/vehicle_registrations/archived", params={"date": "2024-03-05", "q": "toyota"})
    wrong_day = await async_client.get("/records/vehicle_registrations/archived", params={"date": "2024-03-04"})
    wrong_text = await async_client.get("/records/vehicle_registrations/archived", params={"q": "honda"})

    assert hit.json()["count"] == 1
    assert wrong_day.json()["count"] == 0
    assert wrong_text.json()["count"] == 0


async def test_restore_round_trip(async_client, seeded):
    archived = (await async_client.post("/records/vehicle_registrations/V1/archive")).json()

    r = await async_client.post(f"/records/vehicle_registrations/archived/{archived['new_record_id']}/restore")

    assert r.status_code == 200
    assert r.json()["outcome"] == "completed"
    active = (await async_client.get("/records/vehicle_registrations/active")).json()
    assert active["count"] == 1
    assert "archivedAt" not in active["records"][0]["payload"]


async def test_archive_missing_returns_404(async_client, seeded):
    r = await async_client.post("/records/complaints/missing/archive")

    assert r.status_code == 404
    body = r.json()
    assert body["outcome"] == "failed"
    assert "complaint" in body["message"]


async def test_archive_partial_failure_returns_207(async_client, seeded):
    seeded.delete = AsyncMock(side_effect=DocumentStoreError("timeout"))

    r = await async_client.post("/records/vehicle_registrations/V1/archive")

    assert r.status_code == 207
    body = r.json()
    assert body["outcome"] == "partially_completed"
    assert body["duplicate_risk"] is True


async def test_archive_transport_failure_returns_503_without_raw_error(async_client, seeded):
    seeded.add = AsyncMock(side_effect=DocumentStoreError("socket closed by peer"))

    r = await async_client.post("/records/vehicle_registrations/V1/archive")

    assert r.status_code == 503
    assert "socket" not in r.json()["message"]


async def test_list_transport_failure_returns_503(async_client, seeded):
    seeded.query = AsyncMock(side_effect=DocumentStoreError("down"))
    seeded.list = AsyncMock(side_effect=DocumentStoreError("down"))

    r = await async_client.get("/records/complaints/active")

    assert r.status_code == 503
    assert "complaint" in r.json()["detail"]


async def test_unknown_kind_returns_404(async_client):
    r = await async_client.get("/records/parcels/archived")

    assert r.status_code == 404
    assert "detail" in r.json()


async def test_invalid_date_returns_422(async_client):
    r = await async_client.get("/records/complaints/archived", params={"date": "2024-13-45"})

    assert r.status_code == 422


async def test_overlong_query_returns_422(async_client):
    r = await async_client.get("/records/complaints/archived", params={"q": "x" * 500})

    assert r.status_code == 422
