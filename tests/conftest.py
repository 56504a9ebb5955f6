"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from kaizen.main import app
from kaizen.database import database, ensure_indexes


@pytest_asyncio.fixture
async def test_db():
    """In-memory Motor database with the service indexes."""
    client = AsyncMongoMockClient()
    db = client["kaizen_test"]
    await ensure_indexes(db)
    return db


@pytest_asyncio.fixture
async def app_client(test_db):
    """
    Create a test client backed by a clean in-memory database.

    This fixture:
    - Points the database dependency at the test database
    - Yields an async HTTP client for testing
    - Restores the original database afterwards
    """
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.db = original_db


async def register_and_login(client: AsyncClient, email: str) -> dict:
    """Register a user and return bearer headers for them."""
    await client.post(
        "/auth/register",
        json={"email": email, "password": "password123", "name": "Test User"},
    )
    response = await client.post(
        "/auth/login",
        json={"email": email, "password": "password123"},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login_as(app_client):
    """Register and log in an arbitrary email, returning bearer headers."""

    async def _login_as(email):
        return await register_and_login(app_client, email)

    return _login_as


@pytest_asyncio.fixture
async def auth_headers(app_client):
    return await register_and_login(app_client, "test@example.com")


@pytest_asyncio.fixture
async def other_headers(app_client):
    return await register_and_login(app_client, "other@example.com")


@pytest.fixture
def make_task(app_client):
    """Factory creating a project and a task in it; returns the task JSON."""

    async def _make_task(headers, task_name="Write report", project_name="Work"):
        project = await app_client.post(
            "/projects",
            json={"name": project_name, "color": "#FF5733"},
            headers=headers,
        )
        task = await app_client.post(
            "/tasks",
            json={"project_id": project.json()["id"], "name": task_name},
            headers=headers,
        )
        return task.json()

    return _make_task
