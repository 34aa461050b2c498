"""
Pytest configuration and shared fixtures.

Test settings are put in the environment before any outreach import so
the cached settings and the engine pick them up.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_outreach.db")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("AUTH_TOKEN", "test-token")

import pytest
from fastapi.testclient import TestClient

from outreach.config import get_settings
get_settings.cache_clear()

from outreach.main import app
from outreach.storage import SessionLocal, Base, engine


@pytest.fixture(scope="function")
def client():
    """Test client with a fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {os.environ['AUTH_TOKEN']}"}


@pytest.fixture
def db(client):
    """Session on the test database, for seeding and inspecting rows."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def patient_body() -> dict:
    return {
        "phoneNumber": "1234567890",
        "firstName": "A",
        "lastName": "B",
        "language": "en",
        "coachId": "c1",
        "coachName": "Coach",
        "isEnabled": True,
        "msgTime": "08:30",
    }
