"""Pytest configuration and shared fixtures."""

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from api.database import Database
from api.storage import LocalObjectStore, reset_object_store

PASSWORD = "correct-horse"


@pytest.fixture
def mock_db():
    """In-memory MongoDB with the production collections and indexes."""
    client = AsyncMongoMockClient()
    Database.client = client
    Database.db = client["vibenotes_test"]
    asyncio.run(Database._initialize_collections())

    yield Database.db

    Database.client = None
    Database.db = None


@pytest.fixture
def media_store(tmp_path):
    store = LocalObjectStore(base_path=tmp_path / "media", base_url="/media")
    reset_object_store(store)
    yield store
    reset_object_store()


@pytest.fixture
def api_client(mock_db, media_store):
    """FastAPI test client backed by the in-memory database.

    The lifespan is not entered, so no real MongoDB connection is made.
    """
    from api.app import app

    return TestClient(app)


@pytest.fixture
def sample_user_data():
    """Sample credentials with a unique email per test."""
    return {"email": f"test-{uuid.uuid4().hex[:8]}@example.com", "password": PASSWORD}


def sign_up(client: TestClient, email: str | None = None) -> dict:
    """Create a user and return its auth headers plus the user payload."""
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    response = client.post("/auth/signup", json={"email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text

    session = response.json()["data"]
    # Each identity authenticates by header only
    client.cookies.clear()
    return {
        "headers": {"Authorization": f"Bearer {session['access_token']}"},
        "user": session["user"],
    }


@pytest.fixture
def alice(api_client):
    return sign_up(api_client)


@pytest.fixture
def bob(api_client):
    return sign_up(api_client)
