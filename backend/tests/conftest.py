"""
PlaceBook Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before anything from `placebook`
       is imported, so the settings singleton picks them up.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock session for service unit tests
    ├── database:         real throwaway SQLite database (aiosqlite)
    ├── geocoder:         FakeGeocoder returning fixed coordinates
    ├── app / client:     application wired to the two above + httpx client
    ├── png_bytes:        tiny PNG payload for uploads
    └── signup:           helper that creates a user and returns its auth data
"""

import os
import tempfile

# Must run before any placebook import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./placebook_test.db"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="placebook_test_")
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["GOOGLE_API_KEY"] = "test-key-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fast hashing in tests
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from placebook.database import Database
from placebook.exceptions import GeocodingError
from placebook.main import create_app
from placebook.schemas.place import Coordinates
from placebook.services.geocoding import Geocoder


EMPIRE_STATE = Coordinates(lat=40.7484405, lng=-73.9878584)


class FakeGeocoder(Geocoder):
    """
    Resolves every address to EMPIRE_STATE, except addresses listed in
    `unknown`, which raise GeocodingError like a ZERO_RESULTS answer.
    """

    def __init__(self):
        self.unknown: List[str] = []
        self.calls: List[str] = []
        self.closed = False

    async def get_coordinates(self, address: str) -> Coordinates:
        self.calls.append(address)
        if address in self.unknown:
            raise GeocodingError(context={"status": "ZERO_RESULTS"})
        return EMPIRE_STATE

    async def aclose(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value = result_with(place)
        await place_service.get_place_by_id(mock_db_session, str(place.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def png_bytes():
    """PNG signature plus an IHDR-sized tail; enough for upload validation."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ══════════════════════════════════════════════════════════════════════════
# Integration Fixtures (real app, real SQLite database)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite file per test with every table created."""
    db = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'placebook.db'}", echo=False)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def app(database, geocoder):
    return create_app(database=database, geocoder=geocoder)


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def signup(client, png_bytes):
    """
    Returns an async helper creating a user through POST /api/users/signup.

    The helper returns the response JSON plus an ``auth`` header dict.
    """

    async def _signup(
        name: str = "Alice",
        email: str = "alice@example.com",
        password: str = "secret1",
    ) -> Dict:
        response = await client.post(
            "/api/users/signup",
            data={"name": name, "email": email, "password": password},
            files={"image": ("avatar.png", png_bytes, "image/png")},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["auth"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _signup


@pytest.fixture
def create_place(client, png_bytes):
    """Returns an async helper posting a place as the given auth header."""

    async def _create_place(
        auth: Dict[str, str],
        title: str = "Empire State Building",
        description: str = "One of the most famous sky scrapers in the world!",
        address: str = "20 W 34th St, New York, NY 10001",
    ):
        return await client.post(
            "/api/places",
            data={"title": title, "description": description, "address": address},
            files={"image": ("place.png", png_bytes, "image/png")},
            headers=auth,
        )

    return _create_place
