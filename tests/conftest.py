"""
tests/conftest.py
Shared fixtures: in-memory snapshot store, a fresh portal per test,
an HTTP client over the ASGI app, and login helpers.
"""

import os
from datetime import datetime

os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@dreamedu.com")
os.environ.setdefault("ADMIN_PASSWORD", "admin123")
os.environ["STORE_BACKEND"] = "memory"
os.environ["SEED_DEMO_TEACHER"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import config.portal as portal_module
from config.store import MemoryBlobStore
from shared.ledger.ledger import Ledger
from shared.models.models import Teacher

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]
TEACHER_PASSWORD = "pw-teacher"

# Studio wall clock for every test: 1 Jan 2026, 09:30
NOW = datetime(2026, 1, 1, 9, 30)


def fixed_clock() -> datetime:
    return NOW


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def login(client: AsyncClient, email: str, password: str, remember: bool = False) -> dict:
    """Log in through the API and return headers for the new active session."""
    response = await client.post(
        "/auth/login",
        json={"email": email, "password": password, "remember": remember},
    )
    assert response.status_code == 200, response.text
    return auth_headers(response.json()["access_token"])


async def login_admin(client: AsyncClient) -> dict:
    return await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def ledger() -> Ledger:
    return Ledger(admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD, clock=fixed_clock)


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore(prefix="dream_")


@pytest_asyncio.fixture
async def portal(store: MemoryBlobStore):
    p = await portal_module.init_portal(store)
    p.ledger.clock = fixed_clock
    yield p
    portal_module.portal = None


@pytest_asyncio.fixture
async def client(portal):
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def teacher(portal) -> Teacher:
    """An approved teacher with no hours."""
    t = portal.ledger.register_teacher("Nimal Perera", "nimal@dreamedu.com", TEACHER_PASSWORD)
    portal.ledger.approve_teacher(t.id)
    await portal.persist()
    return t


@pytest_asyncio.fixture
async def teacher_headers(client: AsyncClient, teacher: Teacher) -> dict:
    return await login(client, teacher.email, TEACHER_PASSWORD)
