"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.main import create_app
from catalog.models import BookInput
from catalog.service import BookService
from catalog.store import InMemoryBookStore

ADMIN_AUTH = ("admin", "admin123")


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds=1):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    """Create a frozen clock for deterministic timestamps."""
    return FrozenClock()


@pytest.fixture
def store(clock):
    """Create an empty store driven by the frozen clock."""
    return InMemoryBookStore(clock=clock)


@pytest.fixture
def book_service(store):
    """Create a book service over the test store."""
    return BookService(store)


@pytest.fixture
def sample_book_input():
    """Create a valid candidate book."""
    return BookInput(
        title="1984",
        author="George Orwell",
        isbn="9780451524935",
        price=Decimal("11.99"),
        published_year=1949
    )


@pytest.fixture
def other_book_input():
    """Create a second valid candidate book with a different ISBN."""
    return BookInput(
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        isbn="9780743273565",
        price=Decimal("12.99"),
        published_year=1925
    )


@pytest.fixture
def api_config():
    """Create API configuration for testing, independent of the environment."""
    return APIConfig(
        _env_file=None,
        basic_auth_users="admin:admin123,user:user123",
        seed_sample_data=False
    )


@pytest.fixture
def app(api_config, book_service):
    """Create the FastAPI application over the test service."""
    return create_app(api_config, service=book_service)


@pytest.fixture
def client(app):
    """Create an unauthenticated test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client):
    """Test client sending the admin credentials on every request."""
    client.auth = ADMIN_AUTH
    return client


@pytest.fixture
def book_payload():
    """JSON body for creating a book."""
    return {
        "title": "1984",
        "author": "George Orwell",
        "isbn": "9780451524935",
        "price": 11.99,
        "publishedYear": 1949
    }
