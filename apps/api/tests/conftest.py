"""
Global pytest configuration and fixtures for the Portal API test suite.
"""

import os
from typing import Any, Callable, Dict, Generator
from unittest.mock import AsyncMock, Mock

# Set test environment variables before the application settings are loaded
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"
os.environ.pop("AUTH_JWKS_URL", None)
os.environ.pop("DATABASE_URL", None)

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from portal.core.database import get_db  # noqa: E402
from portal.main import app  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.organization_fixtures import *  # noqa: F403, F401, E402
from tests.fixtures.store_fixtures import *  # noqa: F403, F401, E402
from tests.fixtures.store_fixtures import InMemoryDatabase  # noqa: E402


@pytest.fixture
def mock_prisma() -> Mock:
    """
    Mock Prisma client for unit tests that check the exact queries issued.
    """
    mock_db = Mock()
    for model in ("member", "role", "organisation", "ticket", "hiringsource"):
        collection = getattr(mock_db, model)
        collection.find_first = AsyncMock()
        collection.find_many = AsyncMock()
        collection.count = AsyncMock()
        collection.create = AsyncMock()
        collection.update = AsyncMock()
        collection.delete = AsyncMock()
    return mock_db


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def valid_jwt_payload() -> Dict[str, Any]:
    """Valid JWT payload for testing."""
    return {
        "sub": "test-user-id-123",
        "email": "test@example.com",
        "name": "Test User",
    }


@pytest.fixture
def valid_jwt_token(test_jwt_secret: str, valid_jwt_payload: Dict[str, Any]) -> str:
    """Generate a valid JWT token for testing."""
    return jwt.encode(valid_jwt_payload, test_jwt_secret, algorithm="HS256")


@pytest.fixture
def invalid_jwt_token() -> str:
    """Generate a token signed with the wrong secret."""
    return jwt.encode({"sub": "test-user-id-123"}, "wrong-secret", algorithm="HS256")


@pytest.fixture
def auth_headers(valid_jwt_token: str) -> Dict[str, str]:
    """Generate authentication headers with valid JWT token."""
    return {"Authorization": f"Bearer {valid_jwt_token}"}


@pytest.fixture
def auth_headers_for(test_jwt_secret: str) -> Callable[[str], Dict[str, str]]:
    """Build authentication headers for a given user ID."""

    def _headers(user_id: str) -> Dict[str, str]:
        token = jwt.encode({"sub": user_id}, test_jwt_secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(store: InMemoryDatabase) -> Generator[TestClient, None, None]:
    """
    FastAPI test client wired to the in-memory store.

    The client is not used as a context manager, so the lifespan (and the
    real database connection) never starts.
    """
    app.dependency_overrides[get_db] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
