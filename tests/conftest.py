"""
Mesto Backend - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests (no DB)
    ├── test_settings:   Settings pointing at in-memory SQLite
    ├── app:             create_app(test_settings) with tables created
    ├── test_client:     HTTPX AsyncClient bound to the app (one cookie jar)
    └── client_factory:  extra clients, one per simulated browser/user
"""

import os
from typing import AsyncGenerator, Callable, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-for-mesto-tokens-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"

from mesto.config import Settings  # noqa: E402
from mesto.database import create_all, dispose_engine  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_user(mock_db_session):
            mock_db_session.get.return_value = user
            result = await user_service.get_user(mock_db_session, user.id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.get_bind = MagicMock()
    session.info = {}
    return session


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        log_level="WARNING",
        store_timeout_seconds=5,
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """A fresh application with its own in-memory database."""
    from mesto.main import create_app

    application = create_app(test_settings)
    await create_all(application.state.engine)
    yield application
    await dispose_engine(application.state.engine)


@pytest_asyncio.fixture
async def client_factory(app) -> AsyncGenerator[Callable[[], AsyncClient], None]:
    """
    Builds independent clients against the same app.

    Each client has its own cookie jar, so two clients behave like two
    signed-in browsers (user A and user B).
    """
    clients: List[AsyncClient] = []

    def make() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def test_client(client_factory) -> AsyncClient:
    return client_factory()


@pytest.fixture
def sign_up_and_in():
    """Register an email, sign in with the same client and return the user body."""

    async def _sign_up_and_in(client: AsyncClient, email: str, password: str = "secret1") -> dict:
        response = await client.post("/signup", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        response = await client.post("/signin", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return (await client.get("/users/me")).json()

    return _sign_up_and_in


@pytest.fixture
def valid_card() -> dict:
    return {
        "name": "Архыз",
        "link": "https://pictures.s3.yandex.net/frontend-developer/cards-compressed/arkhyz.jpg",
    }
