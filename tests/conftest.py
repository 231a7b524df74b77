"""Pytest configuration and fixtures.

Settings are read once at import time, so the environment is pointed at a
throwaway SQLite database and upload directory before ``propertyhub`` loads.
"""

import asyncio
import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="propertyhub-tests-"))
os.environ.update(
    {
        "APP_ENV": "test",
        "DATABASE_URL": f"sqlite+aiosqlite:///{_TMP / 'test.db'}",
        "AUTO_CREATE_TABLES": "false",
        "AUDIT_LOG_ENABLED": "false",
        "PASSWORD_HASH_ROUNDS": "4",
        "UPLOAD_DIR": str(_TMP / "uploads"),
        "JWT_SECRET_KEY": "test-secret",
    }
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from propertyhub.core.security import hash_password  # noqa: E402
from propertyhub.db.base import async_session_factory, drop_models, init_models  # noqa: E402
from propertyhub.domain.user import User  # noqa: E402
from propertyhub.main import create_app  # noqa: E402
from propertyhub.services.land_registry_import import progress_registry  # noqa: E402

PASSWORD = "Str0ng!Pass"


def run(coro):
    """Drive a coroutine to completion from synchronous test code."""
    return asyncio.run(coro)


async def _in_session(fn):
    async with async_session_factory() as session:
        result = await fn(session)
        await session.commit()
        return result


def db(fn):
    """Run ``await fn(session)`` in its own committed session."""
    return run(_in_session(fn))


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_user(email: str, role: str = "user", password: str = PASSWORD) -> User:
    async def _create(session):
        user = User(
            email=email,
            hashed_password=hash_password(password),
            first_name="Test",
            last_name=role.title(),
            role=role,
            is_email_verified=True,
        )
        session.add(user)
        await session.flush()
        return user

    return db(_create)


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables and an empty import registry."""
    run(drop_models())
    run(init_models())
    progress_registry.clear()
    yield
    progress_registry.clear()


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def user_headers(client):
    create_user("tenant@example.com", role="tenant")
    return auth_header(login(client, "tenant@example.com")["tokens"]["accessToken"])


@pytest.fixture
def agent(client):
    user = create_user("agent@example.com", role="agent")
    token = login(client, "agent@example.com")["tokens"]["accessToken"]
    return user, auth_header(token)


@pytest.fixture
def agent_headers(agent):
    return agent[1]


@pytest.fixture
def admin(client):
    user = create_user("admin@example.com", role="admin")
    token = login(client, "admin@example.com")["tokens"]["accessToken"]
    return user, auth_header(token)


@pytest.fixture
def admin_headers(admin):
    return admin[1]


@pytest.fixture
def make_property(client, agent_headers):
    """Factory creating listings through the API as the agent."""

    def _make(**overrides) -> dict:
        body = {
            "title": "Two bed flat",
            "description": "Bright flat near the station",
            "addressLine1": "1 High Street",
            "city": "Manchester",
            "postcode": "m1 1aa",
            "price": 250000,
            "propertyType": "flat",
            "listingType": "sale",
            "bedrooms": 2,
            "bathrooms": 1,
        }
        body.update(overrides)
        resp = client.post("/api/v1/properties", json=body, headers=agent_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _make
