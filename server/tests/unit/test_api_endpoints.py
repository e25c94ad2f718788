"""Integration tests for the tours API endpoints."""

import logging

import pytest


@pytest.mark.asyncio
async def test_list_tours_endpoint(test_client, catalog):
    """Test the public listing returns published tours in camelCase."""
    response = await test_client.get("/tours")

    assert response.status_code == 200
    data = response.json()
    assert [tour["id"] for tour in data] == ["tour-1"]

    tour = data[0]
    assert tour["basePrice"] == 120.0
    assert tour["maxParticipants"] == 12
    assert tour["startLocation"] == {"id": "loc-A", "name": "Kaikoura Wharf"}
    assert [schedule["id"] for schedule in tour["schedules"]] == ["sched-1"]
    assert tour["schedules"][0]["status"] == "OPEN"


@pytest.mark.asyncio
async def test_list_tours_query_filters(test_client, catalog):
    response = await test_client.get("/tours", params={"search": "DUSKY", "month": 12, "limit": 5})
    assert [tour["id"] for tour in response.json()] == ["tour-1"]

    response = await test_client.get("/tours", params={"difficulty": "MODERATE"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_tours_invalid_query(test_client, catalog):
    """Test invalid query parameters answer 400 with violations."""
    response = await test_client.get("/tours", params={"month": 13})

    assert response.status_code == 400
    data = response.json()
    assert data["status"] == 400
    assert data["code"] == "VALIDATION_ERROR"
    assert data["violations"][0]["path"] == "month"


@pytest.mark.asyncio
async def test_get_tour_endpoint(test_client, catalog):
    response = await test_client.get("/tours/tour-1")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "tour-1"
    assert data["tourType"]["name"] == "Ocean Safari"
    assert data["marineLifeIds"] == []
    assert data["equipment"] == []
    assert "updatedAt" in data


@pytest.mark.asyncio
async def test_get_tour_not_found(test_client, catalog):
    response = await test_client.get("/tours/tour-404")

    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["title"] == "Resource Not Found"


@pytest.mark.asyncio
async def test_create_tour_endpoint(test_client, catalog, admin_headers, seal_kayak_data):
    """Test the tour creation endpoint."""
    response = await test_client.post(
        "/tours",
        json={**seal_kayak_data, "marineLifeIds": ["ml-seal"], "seasons": ["Summer"]},
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Seal Kayak"
    assert data["published"] is False
    assert data["basePrice"] == 45.0
    assert data["highlights"] == ["Marine life observation", "Educational commentary"]
    assert data["marineLifeNames"] == ["NZ Fur Seal"]
    assert data["marineLife"][0]["slug"] == "nz-fur-seal"
    assert data["startLocationId"] == "loc-A"
    assert "id" in data


@pytest.mark.asyncio
async def test_create_tour_logged_at_info(test_client, catalog, admin_headers, seal_kayak_data, caplog):
    """Test the creation log record is emitted without breaking the request."""
    caplog.set_level(logging.INFO)

    response = await test_client.post("/tours", json=seal_kayak_data, headers=admin_headers)

    assert response.status_code == 201
    record = next(r for r in caplog.records if r.getMessage() == "Tour created successfully")
    assert record.tour_name == "Seal Kayak"


@pytest.mark.asyncio
async def test_create_tour_missing_auth(test_client, catalog, seal_kayak_data):
    """Test tour creation without authentication."""
    response = await test_client.post("/tours", json=seal_kayak_data)

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == 401
    assert data["error"] == "Unauthorized"
    assert "authorization" in data["title"].lower()


@pytest.mark.asyncio
async def test_create_tour_not_admin(test_client, catalog, user_headers, seal_kayak_data):
    response = await test_client.post("/tours", json=seal_kayak_data, headers=user_headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


@pytest.mark.asyncio
async def test_create_tour_invalid_token(test_client, catalog, seal_kayak_data):
    response = await test_client.post(
        "/tours",
        json=seal_kayak_data,
        headers={"Authorization": "Bearer not-a-session"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_tour_invalid_data(test_client, catalog, admin_headers, seal_kayak_data):
    """Test tour creation with invalid data."""
    invalid_data = {**seal_kayak_data, "duration": 0}
    del invalid_data["name"]

    response = await test_client.post("/tours", json=invalid_data, headers=admin_headers)

    assert response.status_code == 400
    data = response.json()
    assert data["status"] == 400
    paths = {violation["path"] for violation in data["violations"]}
    assert paths == {"name", "duration"}


@pytest.mark.asyncio
async def test_create_tour_unknown_marine_life(test_client, catalog, admin_headers, seal_kayak_data):
    response = await test_client.post(
        "/tours",
        json={**seal_kayak_data, "marineLifeIds": ["ml-kraken"]},
        headers=admin_headers,
    )

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "INVALID_MARINE_LIFE"
    assert data["invalid"][0]["value"] == "ml-kraken"


@pytest.mark.asyncio
async def test_patch_tour_endpoint(test_client, catalog, admin_headers):
    """Test a partial update keeps omitted relations and clears null ones."""
    response = await test_client.patch(
        "/tours/tour-1",
        json={"basePrice": 135.5, "tourTypeId": None},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["basePrice"] == 135.5
    assert data["tourTypeId"] is None
    assert data["tourType"] is None
    assert data["startLocationId"] == "loc-A"


@pytest.mark.asyncio
async def test_patch_rejects_null_for_required_field(test_client, catalog, admin_headers):
    response = await test_client.patch("/tours/tour-1", json={"name": None}, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_put_tour_endpoint(test_client, catalog, admin_headers, seal_kayak_data):
    response = await test_client.put("/tours/tour-1", json=seal_kayak_data, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Seal Kayak"
    assert data["tourTypeId"] is None


@pytest.mark.asyncio
async def test_delete_tour_endpoint(test_client, catalog, admin_headers):
    """Test deleting hides the tour and repeating the call succeeds."""
    response = await test_client.delete("/tours/tour-1", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await test_client.delete("/tours/tour-1", headers=admin_headers)
    assert response.status_code == 200

    assert (await test_client.get("/tours/tour-1")).status_code == 404
    assert (await test_client.get("/tours")).json() == []


@pytest.mark.asyncio
async def test_delete_tour_requires_session(test_client, catalog):
    response = await test_client.delete("/tours/tour-1")

    assert response.status_code == 401
