"""Integration tests for the checkout API endpoints."""

from urllib.parse import urlparse

import pytest


@pytest.mark.asyncio
async def test_create_order_endpoint(test_client, catalog, checkout_payload):
    """Test a valid booking answers 201 with the PayPal order and approval URL."""
    response = await test_client.post("/checkout/create-order", json=checkout_payload)

    assert response.status_code == 201
    data = response.json()
    assert set(data) == {"orderID", "approvalUrl"}
    assert data["orderID"].startswith("5O190127TN36471")
    assert urlparse(data["approvalUrl"]).hostname.endswith("paypal.com")


@pytest.mark.asyncio
async def test_create_order_missing_fields(test_client, catalog):
    response = await test_client.post("/checkout/create-order", json={"tourId": "t1"})

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "MISSING_FIELDS"
    assert data["error"] == "Missing required fields"
    assert data["missing"] == [
        "scheduleId",
        "participants",
        "totalPrice",
        "contactInfo.fullName",
        "contactInfo.email",
        "contactInfo.phone",
    ]


@pytest.mark.asyncio
async def test_create_order_without_body(test_client, catalog, fake_paypal):
    response = await test_client.post("/checkout/create-order")

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_FIELDS"
    assert fake_paypal.requests == []


@pytest.mark.asyncio
async def test_create_order_invalid_participants(test_client, catalog, checkout_payload):
    response = await test_client.post(
        "/checkout/create-order",
        json={**checkout_payload, "participants": -2},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "INVALID_FIELDS"
    assert data["invalid"][0]["field"] == "participants"


@pytest.mark.asyncio
async def test_create_order_unknown_tour(test_client, catalog, checkout_payload):
    response = await test_client.post(
        "/checkout/create-order",
        json={**checkout_payload, "tourId": "tour-404"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Tour not found"
    assert data["missing"] == "tourId"


@pytest.mark.asyncio
async def test_create_order_unknown_schedule(test_client, catalog, checkout_payload):
    response = await test_client.post(
        "/checkout/create-order",
        json={**checkout_payload, "scheduleId": "sched-404"},
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Schedule not found"
    assert data["missing"] == "scheduleId"


@pytest.mark.asyncio
async def test_create_order_provider_failure(test_client, catalog, fake_paypal, checkout_payload):
    """Test provider failures answer 500 with a provider error code."""
    fake_paypal.order_status = 503

    response = await test_client.post("/checkout/create-order", json=checkout_payload)

    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "PROVIDER_API_ERROR"
    assert data["title"] == "Payment Provider Error"
    assert data["timestamp"].endswith("Z")
    assert "+00:00" not in data["timestamp"]


@pytest.mark.asyncio
async def test_create_order_provider_auth_failure(test_client, catalog, fake_paypal, checkout_payload):
    fake_paypal.token_status = 401

    response = await test_client.post("/checkout/create-order", json=checkout_payload)

    assert response.status_code == 500
    assert response.json()["code"] == "PROVIDER_AUTH_ERROR"


@pytest.mark.asyncio
async def test_create_order_idempotency_header(test_client, catalog, fake_paypal, checkout_payload):
    headers = {"Idempotency-Key": "checkout-7f3a"}

    first = await test_client.post("/checkout/create-order", json=checkout_payload, headers=headers)
    second = await test_client.post("/checkout/create-order", json=checkout_payload, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json() == first.json()
    assert len(fake_paypal.order_requests) == 1

    changed = await test_client.post(
        "/checkout/create-order",
        json={**checkout_payload, "totalPrice": 360.0, "participants": 3},
        headers=headers,
    )
    assert changed.status_code == 422
    assert changed.json()["code"] == "IDEMPOTENCY_KEY_MISMATCH"


@pytest.mark.asyncio
async def test_get_order_endpoint(test_client, catalog, admin_headers, checkout_payload):
    created = (await test_client.post("/checkout/create-order", json=checkout_payload)).json()

    response = await test_client.get(f"/checkout/orders/{created['orderID']}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["orderID"] == created["orderID"]
    assert data["status"] == "CREATED"
    assert data["amount"] == 240.0
    assert data["currency"] == "USD"
    assert data["contactInfo"] == checkout_payload["contactInfo"]
    assert data["approvalUrl"] == created["approvalUrl"]


@pytest.mark.asyncio
async def test_get_order_requires_admin(test_client, catalog, user_headers):
    response = await test_client.get("/checkout/orders/5O190127TN3647101", headers=user_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_order_not_found(test_client, catalog, admin_headers):
    response = await test_client.get("/checkout/orders/5O190127TN3647199", headers=admin_headers)

    assert response.status_code == 404
