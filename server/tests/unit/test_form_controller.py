"""Tests for the admin tour form controller."""

import asyncio

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from ocean_tours.admin import AdminFormController, FormState
from ocean_tours.admin.form_controller import ADMIN_TOURS_PATH, TOURS_CACHE_KEY

LONG_DESCRIPTION = (
    "Paddle calm coastal waters alongside a resident colony of harbour seals "
    "with an experienced naturalist guide."
)


@pytest.fixture
def form_values():
    return {
        "name": "Seal Kayak",
        "description": LONG_DESCRIPTION,
        "difficulty": "EASY",
        "duration": 3,
        "maxParticipants": 8,
        "basePrice": 45,
        "marineLifeIds": ["ml-seal"],
        "seasons": ["Summer", "Autumn"],
        "conservationInfo": "Kayaks stay twenty metres from hauled-out seals.",
        "departurePort": "Kaikoura Wharf",
        "marineArea": "Kaikoura Peninsula",
        "expeditionType": "Seal Kayaking",
        "startLocationId": "loc-A",
        "endLocationId": "loc-A",
    }


@pytest_asyncio.fixture
async def api_client(test_app, admin_headers):
    """HTTP client bound to the in-process API with an admin session."""
    async with httpx.AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
        headers=admin_headers,
    ) as client:
        yield client


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


@pytest.mark.asyncio
async def test_create_submission(api_client, catalog, form_values):
    """Test a valid form creates the tour, then refreshes and navigates."""
    invalidated = []
    navigated = []

    async def navigate(path):
        navigated.append(path)

    controller = AdminFormController(api_client, invalidate=invalidated.append, navigate=navigate)

    result = await controller.submit(form_values)

    assert result.state == FormState.SUCCESS
    assert controller.state == FormState.SUCCESS
    assert result.tour["name"] == "Seal Kayak"
    assert result.tour["marineLifeNames"] == ["NZ Fur Seal"]
    assert controller.tour_id == result.tour["id"]
    assert invalidated == [TOURS_CACHE_KEY]
    assert navigated == [ADMIN_TOURS_PATH]


@pytest.mark.asyncio
async def test_edit_submission_patches(api_client, catalog, form_values):
    controller = AdminFormController(api_client, tour_id="tour-1")

    result = await controller.submit({**form_values, "name": "Dusky Dolphin Swim"})

    assert result.state == FormState.SUCCESS
    assert result.tour["id"] == "tour-1"
    assert result.tour["name"] == "Dusky Dolphin Swim"
    assert result.tour["tourTypeId"] == "tt-safari"


@pytest.mark.asyncio
async def test_invalid_form_is_not_sent(form_values):
    """Test local validation failures return to idle without a request."""
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(201, json={"id": "tour-9"})

    async with _mock_client(handler) as client:
        controller = AdminFormController(client)
        result = await controller.submit({**form_values, "name": "Ab", "marineLifeIds": [], "conservationInfo": "short"})

    assert result.state == FormState.IDLE
    assert set(result.field_errors) == {"name", "marineLifeIds", "conservationInfo"}
    assert sent == []


@pytest.mark.asyncio
async def test_server_error_keeps_values(form_values):
    def handler(request):
        return httpx.Response(400, json={"code": "INVALID_MARINE_LIFE", "error": "Invalid marine life IDs: ml-seal"})

    async with _mock_client(handler) as client:
        controller = AdminFormController(client)
        result = await controller.submit(form_values)

    assert result.state == FormState.ERROR
    assert result.error == "Invalid marine life IDs: ml-seal"
    assert controller.values == form_values
    assert controller.tour_id is None


@pytest.mark.asyncio
async def test_network_error(form_values):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    navigated = []
    async with _mock_client(handler) as client:
        controller = AdminFormController(client, navigate=navigated.append)
        result = await controller.submit(form_values)

    assert result.state == FormState.ERROR
    assert result.error.startswith("Could not reach the server")
    assert navigated == []


@pytest.mark.asyncio
async def test_submission_while_in_flight_is_dropped(form_values):
    """Test a second submit during an in-flight request is ignored."""
    sent = []

    async def handler(request):
        sent.append(request)
        await asyncio.sleep(0.01)
        return httpx.Response(201, json={"id": "tour-9", "name": "Seal Kayak"})

    async with _mock_client(handler) as client:
        controller = AdminFormController(client)
        first, second = await asyncio.gather(controller.submit(form_values), controller.submit(form_values))

    assert first.state == FormState.SUCCESS
    assert second.dropped is True
    assert len(sent) == 1
    assert controller.is_submitting is False
