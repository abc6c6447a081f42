"""
Pytest configuration and shared fixtures.

Every test gets a fresh file-backed SQLite database; the app's ``get_db``
dependency is overridden to use it. Auth fixtures go through the real
register/login endpoints.
"""
import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core import redis as redis_client
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app

API = "/api/v1"

ADMIN_USER = {
    "name": "Test Admin",
    "email": "admin@example.com",
    "username": "admin",
    "whatsapp": "9876543210",
    "password": "secret123",
    "password_confirmation": "secret123",
}


class FakeRedis:
    """In-memory stand-in for the few Redis commands the app uses."""

    def __init__(self):
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}
        self.values: dict[str, str] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.ttls[key] = seconds

    async def ttl(self, key):
        return self.ttls.get(key, -1)

    async def set(self, key, value, ex=None):
        self.values[key] = value
        if ex is not None:
            self.ttls[key] = ex

    async def exists(self, key):
        return int(key in self.values or key in self.counts)


def run(coro):
    """Run a coroutine from a sync test."""
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()

    async def get_fake():
        return fake

    monkeypatch.setattr(redis_client, "get_redis", get_fake)
    return fake


@pytest.fixture
def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run(create_tables())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    run(engine.dispose())


@pytest.fixture
def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def registered_user(client):
    response = client.post(f"{API}/auth/register", json=ADMIN_USER)
    assert response.status_code == 201, response.text
    return response.json()["data"]["user"]


@pytest.fixture
def tokens(client, registered_user):
    response = client.post(
        f"{API}/auth/login",
        json={"username": ADMIN_USER["username"], "password": ADMIN_USER["password"]},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def registry():
    return fastapi_app.state.resources


@pytest.fixture
def product_payload():
    return {
        "name": "Steel Water Bottle",
        "slug": "steel-water-bottle",
        "sku": "SWB-750",
        "cost": "210.50",
        "price": 449,
        "mrp": 499,
        "stock_quantity": 25,
    }
