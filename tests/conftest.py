"""Shared fixtures: every test gets freshly seeded stores."""

import pytest
from fastapi.testclient import TestClient

from hr_admin.config import Settings
from hr_admin.database import build_database
from hr_admin.main import create_app
from hr_admin.security import PasswordHasher

# Lowest bcrypt work factor keeps the suite fast
TEST_SETTINGS = Settings(
    JWT_SECRET="test-secret",
    BCRYPT_ROUNDS=4,
    SEED_ADMIN_PASSWORD="admin123",
    LOG_LEVEL="WARNING",
)


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def db(settings):
    return build_database(settings)


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture
def auth_headers(client):
    r = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
