# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Fresh in-memory SQLite schema per test
# - Resets process-local state (rate limiter, login throttle, outbox, 2FA)
# - Helpers to register users and build auth headers
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-pytest-only"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient

from app.main import app
from core.services.two_factor_service import TwoFactorService
from lib.database import Base, SessionLocal, engine, init_db
from lib.email_client import EmailClient
from lib.login_throttle import login_throttle
from lib.rate_limiter import limiter

DEFAULT_PASSWORD = "correct-horse-battery"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_state():
    """Empty database and cleared in-memory state for every test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    limiter.reset()
    login_throttle.reset()
    EmailClient.outbox.clear()
    TwoFactorService.clear_pending()
    yield
    EmailClient.outbox.clear()


@pytest.fixture
def db():
    """A database session on the shared test engine."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def register(client: TestClient, email: str = "alice@example.com", password: str = DEFAULT_PASSWORD) -> dict:
    """Register a user and return the token response body."""
    response = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    """Authorization headers for a freshly registered user."""
    return bearer(register(client)["access_token"])


@pytest.fixture
def other_headers(client):
    """Authorization headers for a second, unrelated user."""
    return bearer(register(client, email="bob@example.com")["access_token"])


@pytest.fixture
def application(client, auth_headers):
    """One application owned by the auth_headers user."""
    response = client.post(
        "/api/v1/applications",
        json={"company": "Acme", "title": "Backend Engineer", "stage": "APPLIED"},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
