"""Shared test configuration and fixtures for backend tests.

Key principles:
- All HTTP calls go through the local ASGI app (no remote BASE_URL).
- Each test gets its own database. With MONGO_URL set, that is a throwaway
  database on a real MongoDB; otherwise an in-memory mongomock-motor one.
- httpx.AsyncClient(transport=ASGITransport(app)) for HTTP tests.
- AnyIO is the single async runner via pytest-anyio (@pytest.mark.anyio).
"""

from __future__ import annotations

import os
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict, List

import httpx
import pytest
from httpx import ASGITransport
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient

# Ensure backend root is on sys.path so that `server` module is importable
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from server import app  # noqa: E402
from tourbook.auth import create_access_token, hash_password  # noqa: E402
from tourbook.db import get_db  # noqa: E402
from tourbook.repositories.user_repository import UserRepository  # noqa: E402
from tourbook.seed import ensure_indexes  # noqa: E402
from tourbook.utils import now_utc  # noqa: E402


MONGO_URL = os.environ.get("MONGO_URL")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio event loop."""

    return "asyncio"


@pytest.fixture(scope="function")
async def test_db() -> AsyncGenerator[Any, None]:
    """Function-scoped isolated database with the production indexes."""

    db_name = f"tourbook_test_{uuid.uuid4().hex}"
    client: Any = AsyncIOMotorClient(MONGO_URL, tz_aware=True) if MONGO_URL else AsyncMongoMockClient(tz_aware=True)
    db = client[db_name]
    await ensure_indexes(db)
    try:
        yield db
    finally:
        if MONGO_URL:
            await client.drop_database(db_name)
            client.close()


@pytest.fixture(scope="function")
async def app_with_overrides(test_db) -> AsyncGenerator[Any, None]:
    """FastAPI app instance whose get_db dependency points to test_db."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(app_with_overrides) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = ASGITransport(app=app_with_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def _create_user(db, *, name: str, email: str, password: str, role: str) -> Dict[str, Any]:
    user = await UserRepository(db).create(name=name, email=email, password_hash=hash_password(password), role=role)
    user["token"] = create_access_token(subject=str(user["_id"]), role=role)
    user["headers"] = {"Authorization": f"Bearer {user['token']}"}
    return user


@pytest.fixture
async def customer(test_db) -> Dict[str, Any]:
    return await _create_user(test_db, name="Asha Traveller", email="asha@example.com", password="secret123", role="user")


@pytest.fixture
async def other_customer(test_db) -> Dict[str, Any]:
    return await _create_user(test_db, name="Ravi Walker", email="ravi@example.com", password="secret123", role="user")


@pytest.fixture
async def admin(test_db) -> Dict[str, Any]:
    return await _create_user(test_db, name="Ops Admin", email="admin@example.com", password="admin123", role="admin")


# ---------------------------------------------------------------------------
# Tours and booking payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def make_tour(test_db) -> Callable[..., Any]:
    async def _make(**overrides: Any) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "title": f"Coastal Escape {uuid.uuid4().hex[:6]}",
            "description": "Three days along the Konkan coast",
            "location": "Goa",
            "price": 1000,
            "duration": 3,
            "maxGroupSize": 10,
            "images": ["https://img.example.com/goa.jpg"],
            "availableSeats": 10,
            "availableDates": [],
            "createdAt": now_utc(),
            "updatedAt": now_utc(),
        }
        doc.update(overrides)
        if doc.get("availableSeats") is None:
            doc.pop("availableSeats", None)
        res = await test_db.tours.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    return _make


def make_guests(count: int) -> List[Dict[str, Any]]:
    return [
        {"name": f"Guest {i + 1}", "email": f"guest{i + 1}@example.com", "phone": f"+91-90000000{i:02d}"}
        for i in range(count)
    ]


CUSTOMER_INFO = {"name": "Asha Traveller", "email": "asha@example.com", "phone": "+91-9000000000"}
TOUR_DAY = datetime(2026, 12, 1, tzinfo=timezone.utc)


@pytest.fixture
def guests_factory() -> Callable[[int], List[Dict[str, Any]]]:
    return make_guests


@pytest.fixture
def booking_kwargs(customer) -> Callable[..., Dict[str, Any]]:
    """Keyword arguments for booking_lifecycle.create_booking."""

    def _build(tour: Dict[str, Any], guests: int = 1, **overrides: Any) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "user_id": str(customer["_id"]),
            "tour_id": str(tour["_id"]),
            "number_of_guests": guests,
            "tour_date": TOUR_DAY,
            "customer_info": dict(CUSTOMER_INFO),
            "guests": make_guests(guests),
        }
        kwargs.update(overrides)
        return kwargs

    return _build


@pytest.fixture
def booking_payload() -> Callable[..., Dict[str, Any]]:
    """JSON body for POST /api/bookings."""

    def _build(tour: Dict[str, Any], guests: int = 1, **overrides: Any) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "tourPackageId": str(tour["_id"]),
            "numberOfGuests": guests,
            "tourDate": TOUR_DAY.date().isoformat(),
            "customerInfo": dict(CUSTOMER_INFO),
            "guests": make_guests(guests),
        }
        body.update(overrides)
        return body

    return _build
