"""
Shared test fixtures for the Invest Admin Console.

Provides a fake platform API (httpx.MockTransport), a PlatformClient bound
to it, a Redis mock, an authenticated admin session and the async test
client with dependencies overridden.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from invest_admin.api.deps import get_platform
from invest_admin.redis_client import get_redis
from invest_admin.schemas.user import User
from invest_admin.services.platform_client import PlatformClient, set_platform_client
from invest_admin.services.session_service import AdminSession

PLATFORM_URL = "http://platform.test/api"


# --- Fake platform API ---


class FakePlatform:
    """
    Route table for httpx.MockTransport.

    Routes are keyed by method and path relative to the API root
    (``("GET", "/admin/users")``). A route body may be JSON data, an
    exception to raise, or a callable taking the request.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, json: Any = None, status_code: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status_code, json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.method} {path}"})

        status_code, body = route
        if isinstance(body, Exception):
            raise body
        if callable(body):
            return body(request)
        return httpx.Response(status_code, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path.removeprefix("/api") == path
        ]


@pytest.fixture
def platform():
    return FakePlatform()


@pytest_asyncio.fixture
async def platform_client(platform):
    """PlatformClient over the fake platform, installed as the shared client."""
    client = PlatformClient(
        PLATFORM_URL,
        device_id="test-device",
        transport=httpx.MockTransport(platform.handler),
    )
    set_platform_client(client)
    yield client
    set_platform_client(None)
    await client.aclose()


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client with common methods."""
    redis = AsyncMock()
    redis.setex = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


# --- Sessions ---


@pytest.fixture
def admin_user():
    return User(id=1, name="Ada Admin", email="admin@example.com", is_admin=True)


@pytest.fixture
def admin_session(admin_user, mock_redis):
    """A live session whose record the mocked Redis returns."""
    now = datetime.now(timezone.utc)
    session = AdminSession(
        session_id=uuid.uuid4().hex,
        token="platform-token",
        user=admin_user,
        created_at=now,
        expires_at=now + timedelta(hours=1),
    )
    raw = session.model_dump_json()
    key = f"session:{session.session_id}"
    mock_redis.get = AsyncMock(side_effect=lambda k: raw if k == key else None)
    return session


@pytest.fixture
def auth_headers(admin_session):
    return {"Authorization": f"Bearer {admin_session.session_id}"}


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(mock_redis, platform_client):
    """
    Async HTTP test client with get_redis and get_platform overridden
    to use test doubles.
    """
    from invest_admin.main import app

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_platform] = lambda: platform_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Sample Data ---


def make_user(id: int, **overrides) -> dict:
    row = {
        "id": id,
        "name": f"User {id}",
        "email": f"user{id}@example.com",
        "phone": f"+8801700000{id:03d}",
        "balance": 100.0,
        "plan_id": 1,
        "is_kyc_verified": False,
        "is_blocked": False,
        "created_at": "2024-06-01T08:00:00Z",
    }
    row.update(overrides)
    return row


def make_withdrawal(id: int, **overrides) -> dict:
    row = {
        "id": id,
        "user_id": 2,
        "amount": 50.0,
        "payment_method": "bkash",
        "payment_details": {"account": "01700000000"},
        "status": "pending",
        "created_at": "2024-06-02T08:00:00Z",
    }
    row.update(overrides)
    return row


def make_transaction(id: int, **overrides) -> dict:
    row = {
        "id": id,
        "user_id": 2,
        "amount": 100.0,
        "type": "deposit",
        "status": "completed",
        "description": f"Transaction {id}",
        "created_at": "2024-06-03T10:00:00Z",
    }
    row.update(overrides)
    return row


def make_kyc(id: int, **overrides) -> dict:
    row = {
        "id": id,
        "user_id": 2,
        "document_type": "passport",
        "document_front_url": f"https://cdn.example.com/kyc/{id}-front.jpg",
        "selfie_url": f"https://cdn.example.com/kyc/{id}-selfie.jpg",
        "status": "pending",
        "created_at": "2024-06-02T09:00:00Z",
    }
    row.update(overrides)
    return row


def make_plan(id: int, **overrides) -> dict:
    row = {
        "id": id,
        "name": f"Plan {id}",
        "daily_deposit_limit": 1000.0,
        "daily_withdrawal_limit": 500.0,
        "daily_profit_limit": 50.0,
        "price": 0.0,
        "is_default": id == 1,
        "created_at": "2024-01-01T00:00:00Z",
    }
    row.update(overrides)
    return row


@pytest.fixture
def sample_rows():
    """Factories for platform JSON rows."""
    return {
        "user": make_user,
        "withdrawal": make_withdrawal,
        "transaction": make_transaction,
        "kyc": make_kyc,
        "plan": make_plan,
    }
