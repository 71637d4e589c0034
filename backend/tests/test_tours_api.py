from __future__ import annotations

import pytest
from bson import ObjectId


@pytest.mark.anyio
async def test_list_and_get_tours(async_client, make_tour) -> None:
    first = await make_tour(title="Backwaters", location="Alleppey")
    await make_tour(title="Dunes", location="Jaisalmer")

    listing = await async_client.get("/api/tours")
    assert listing.status_code == 200
    assert {t["title"] for t in listing.json()} == {"Backwaters", "Dunes"}

    detail = await async_client.get(f"/api/tours/{first['_id']}")
    assert detail.status_code == 200
    assert detail.json()["id"] == str(first["_id"])
    assert detail.json()["location"] == "Alleppey"
    assert detail.json()["availableSeats"] == 10


@pytest.mark.parametrize("tour_id", ["not-an-id", str(ObjectId())])
@pytest.mark.anyio
async def test_unknown_tour(async_client, tour_id) -> None:
    resp = await async_client.get(f"/api/tours/{tour_id}")

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


@pytest.mark.anyio
async def test_health(async_client) -> None:
    resp = await async_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["service"] == "tour-booking"

    deploy = await async_client.get("/health")
    assert deploy.json()["status"] == "healthy"
