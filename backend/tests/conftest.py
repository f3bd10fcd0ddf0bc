"""
Pytest fixtures: application, HTTP clients and signed-in users.

Each test gets its own SQLite file under tmp_path, so tests are isolated
without transaction tricks. Payments run in demo mode with an instant,
always-successful card simulation unless a test says otherwise.
"""

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from onboard.core import security
from onboard.core.config import Settings
from onboard.main import close_services, create_app, init_services


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """bcrypt at production cost makes the suite crawl."""
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


def build_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        ENVIRONMENT="test",
        STORAGE_BACKEND="database",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'onboard.db'}",
        DB_CREATE_SCHEMA=True,
        TOKEN_STORE="memory",
        PAYMENTS_DEMO_MODE=True,
        CARD_SIMULATION_DELAY_SECONDS=0,
        CARD_SIMULATION_SUCCESS_RATE=1.0,
        TICKETS_DIR=str(tmp_path / "tickets"),
        EMAIL_ENABLED=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return build_settings(tmp_path)


@pytest.fixture
def make_settings(tmp_path):
    """Settings for this test's sandbox with a few values overridden."""
    return lambda **overrides: build_settings(tmp_path, **overrides)


async def _serve(settings: Settings, **services) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(settings)
    # ASGITransport does not run the lifespan, so wire services here
    await init_services(app, settings, **services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        ac.app = app
        yield ac
    await close_services(app)


@pytest_asyncio.fixture
async def client(settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app backed by a fresh SQLite database."""
    async for ac in _serve(settings):
        yield ac


@pytest_asyncio.fixture
async def memory_client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app backed by the in-process store."""
    async for ac in _serve(build_settings(tmp_path, STORAGE_BACKEND="memory")):
        yield ac


@pytest.fixture
def serve():
    """Start an app with custom settings or services: `async for ac in serve(settings): ...`."""
    return _serve


@pytest.fixture
def booking_payload():
    """Build a booking request body; defaults to JFK -> LHR, one passenger, one way."""

    def build(origin="JFK", destination="LHR", passengers=1, contact_email="alice@example.com", **extra):
        body = {
            "route": {
                "from": {"code": origin},
                "to": {"code": destination},
                "departureDate": (date.today() + timedelta(days=30)).isoformat(),
                "tripType": "oneway",
            },
            "passengers": [
                {
                    "title": "Ms",
                    "firstName": f"Traveller{i}",
                    "lastName": "Smith",
                    "email": f"traveller{i}@example.com",
                }
                for i in range(passengers)
            ],
            "contactEmail": contact_email,
            "termsAccepted": True,
        }
        body.update(extra)
        return body

    return build


@pytest.fixture
def card_details():
    expiry = date.today().replace(day=1) + timedelta(days=400)
    return {
        "cardNumber": "4242424242424242",
        "expiryDate": expiry.strftime("%m/%y"),
        "cvv": "123",
        "cardholderName": "Alice Smith",
    }


async def register(client: AsyncClient, email="alice@example.com", password="password123", **extra) -> dict:
    body = {
        "email": email,
        "password": password,
        "firstName": "Alice",
        "lastName": "Smith",
        "title": "Ms",
    }
    body.update(extra)
    response = await client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def register_user():
    return register


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict:
    """Authorization headers for a freshly registered user."""
    data = await register(client)
    return {"Authorization": f"Bearer {data['token']}"}


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient, settings: Settings) -> dict:
    """Authorization headers for the seeded administrator."""
    response = await client.post("/api/auth/login", json={
        "email": settings.ADMIN_EMAIL,
        "password": settings.ADMIN_PASSWORD,
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def pending_booking(client: AsyncClient, auth_headers: dict, booking_payload) -> dict:
    response = await client.post("/api/bookings", json=booking_payload(), headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["booking"]
