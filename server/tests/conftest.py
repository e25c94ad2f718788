"""Test configuration and fixtures."""

import json
import os
from datetime import datetime, timedelta
from decimal import Decimal

# Point the application at SQLite before any ocean_tours module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ocean_tours.core.config import PAYPAL_SANDBOX_API_BASE  # noqa: E402
from ocean_tours.core.database import Base, get_db  # noqa: E402
from ocean_tours.core.dependencies import get_paypal_client  # noqa: E402
from ocean_tours.core.security import AuthContext, issue_session_token  # noqa: E402
from ocean_tours.models import *  # noqa: E402,F403 - Import all models
from ocean_tours.models import Location, MarineLife, Schedule, Tour, TourType  # noqa: E402
from ocean_tours.models.mixins import utcnow  # noqa: E402
from ocean_tours.services.paypal_client import PayPalClient  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

LONG_DESCRIPTION = (
    "Paddle calm coastal waters alongside a resident colony of harbour seals "
    "with an experienced naturalist guide."
)


class FakePayPal:
    """
    In-process stand-in for the PayPal REST API, served through httpx.MockTransport.

    Tests flip the attributes to script failures and inspect ``requests``.
    """

    def __init__(self):
        self.token_status = 200
        self.order_status = 201
        self.order_body = None
        self.include_approve_link = True
        self.requests: list[httpx.Request] = []
        self._counter = 0

    @property
    def order_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/v2/checkout/orders"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/v1/oauth2/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json={"access_token": "A21-test-token", "token_type": "Bearer"})

        if request.url.path == "/v2/checkout/orders":
            if self.order_status >= 400:
                return httpx.Response(
                    self.order_status,
                    json={"name": "UNPROCESSABLE_ENTITY", "message": "The requested action could not be performed"},
                )
            if self.order_body is not None:
                return httpx.Response(self.order_status, json=self.order_body)

            self._counter += 1
            order_id = f"5O190127TN36471{self._counter:02d}"
            links = [{"href": f"{PAYPAL_SANDBOX_API_BASE}/v2/checkout/orders/{order_id}", "rel": "self", "method": "GET"}]
            if self.include_approve_link:
                links.append({
                    "href": f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}",
                    "rel": "approve",
                    "method": "GET",
                })
            return httpx.Response(self.order_status, json={"id": order_id, "status": "CREATED", "links": links})

        return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})

    def last_order_payload(self) -> dict:
        return json.loads(self.order_requests[-1].content)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def fake_paypal():
    return FakePayPal()


@pytest_asyncio.fixture(scope="function")
async def paypal_client(fake_paypal):
    """PayPal client wired to the fake provider."""
    async with PayPalClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        base_url=PAYPAL_SANDBOX_API_BASE,
        transport=httpx.MockTransport(fake_paypal),
    ) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, paypal_client):
    """Create a test FastAPI application without lifespan or middleware."""
    from fastapi import FastAPI

    from ocean_tours.main import register_exception_handlers, register_routers

    app = FastAPI(title="Ocean Tours API (Test)", version="1.0.0-test")
    register_exception_handlers(app)
    register_routers(app)

    async def override_get_db():
        yield test_session

    async def override_get_paypal_client():
        yield paypal_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_paypal_client] = override_get_paypal_client

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_auth() -> AuthContext:
    return AuthContext(user_id="admin-1", role="ADMIN", name="Ada Admin")


@pytest.fixture
def user_auth() -> AuthContext:
    return AuthContext(user_id="user-1", role="USER", name="Uma User")


@pytest.fixture
def admin_headers():
    token = issue_session_token("admin-1", "ADMIN", name="Ada Admin", email="ada@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    token = issue_session_token("user-1", "USER", name="Uma User")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def catalog(test_session):
    """
    Seed reference data and two tours.

    ``tour-1`` is published with schedule ``sched-1``; ``tour-2`` is a draft
    with schedule ``sched-2``.
    """
    test_session.add_all([
        Location(id="loc-A", name="Kaikoura Wharf"),
        Location(id="loc-B", name="South Bay"),
        MarineLife(id="ml-orca", name="Orca", slug="orca", animal_type="Mammal",
                   seasons=["Winter", "Spring"], expeditions=["Whale Watching"]),
        MarineLife(id="ml-seal", name="NZ Fur Seal", slug="nz-fur-seal", animal_type="Mammal",
                   seasons=["Summer"], expeditions=["Seal Kayaking"]),
        MarineLife(id="ml-albatross", name="Royal Albatross", slug="royal-albatross", animal_type="Bird",
                   seasons=["Winter"], expeditions=["Pelagic Birding"]),
        TourType(id="tt-safari", name="Ocean Safari"),
    ])
    await test_session.flush()

    now = utcnow()
    published = Tour(
        id="tour-1",
        name="Dusky Dolphin Encounter",
        description=LONG_DESCRIPTION,
        difficulty="EASY",
        duration=3,
        base_price=Decimal("120.00"),
        max_participants=12,
        published=True,
        start_location_id="loc-A",
        end_location_id="loc-A",
        tour_type_id="tt-safari",
        created_at=now - timedelta(days=1),
    )
    draft = Tour(
        id="tour-2",
        name="Albatross Pelagic",
        description=LONG_DESCRIPTION,
        difficulty="MODERATE",
        duration=5,
        base_price=Decimal("210.00"),
        max_participants=8,
        published=False,
        created_at=now,
    )
    test_session.add_all([published, draft])
    await test_session.flush()

    test_session.add_all([
        Schedule(id="sched-1", tour_id="tour-1", start_date=datetime(2026, 12, 1, 9),
                 end_date=datetime(2026, 12, 1, 12), available_spots=10),
        Schedule(id="sched-2", tour_id="tour-2", start_date=datetime(2026, 7, 5, 9),
                 end_date=datetime(2026, 7, 5, 15), available_spots=8),
    ])
    await test_session.commit()

    return {"published": published, "draft": draft}


@pytest.fixture
def checkout_payload():
    """A valid checkout body for the seeded published tour."""
    return {
        "tourId": "tour-1",
        "scheduleId": "sched-1",
        "participants": 2,
        "totalPrice": 240.0,
        "contactInfo": {
            "fullName": "Mere Tane",
            "email": "mere@example.com",
            "phone": "+64 21 555 0101",
        },
    }


@pytest.fixture
def seal_kayak_data():
    """Tour body used by the create scenarios."""
    return {
        "name": "Seal Kayak",
        "description": LONG_DESCRIPTION,
        "difficulty": "EASY",
        "duration": 3,
        "maxParticipants": 8,
        "basePrice": 45.00,
        "startLocationId": "loc-A",
        "endLocationId": "loc-A",
    }
