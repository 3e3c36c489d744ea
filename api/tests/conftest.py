"""Pytest configuration and shared fixtures for the Event Store Browser tests."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jsonschema import Draft202012Validator

from event_browser.config import Settings
from event_browser.main import create_app, load_openapi_spec
from event_browser.models.events import Event
from event_browser.repository.memory import InMemoryEventRepository


# Disable logging for cleaner test output
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)


@pytest.fixture
def test_settings() -> Settings:
    """Override settings for testing."""
    return Settings(
        host="127.0.0.1",
        port=8001,
        debug=True,
        log_level="ERROR",
        event_store_backend="memory",
        default_page_size=20,
        max_page_size=100
    )


@pytest.fixture
def repository() -> InMemoryEventRepository:
    """Empty in-memory event store."""
    return InMemoryEventRepository()


@pytest.fixture
def app(test_settings: Settings, repository: InMemoryEventRepository) -> FastAPI:
    """Create FastAPI application instance for testing."""
    return create_app(settings=test_settings, repository=repository)


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create test client for API testing."""
    return TestClient(app)


@pytest.fixture
def json_api_headers() -> Dict[str, str]:
    """Headers for JSON:API requests."""
    return {"Accept": "application/vnd.api+json"}


@pytest.fixture
def make_events() -> Callable[..., List[Event]]:
    """Factory for lists of distinct events, oldest first."""
    def make(count: int, event_type: str = "DummyEvent") -> List[Event]:
        return [Event(event_type=event_type, data={"index": i}) for i in range(count)]
    return make


@pytest.fixture
def dummy_event() -> Event:
    """The event used by single-event scenarios."""
    return Event(
        event_id="a562dc5c-97c0-4fe9-8b81-10f9bd0e825f",
        event_type="DummyEvent",
        data={"foo": 1, "bar": 2.0, "baz": "3"}
    )


@pytest.fixture
def json_api_lint() -> Callable[..., None]:
    """Validate a response body against the JSON:API schemas of the OpenAPI spec."""
    components = load_openapi_spec()["components"]

    def lint(document: Dict[str, Any], schema_name: str = "EventListDocument") -> None:
        validator = Draft202012Validator({
            "$ref": f"#/components/schemas/{schema_name}",
            "components": components
        })
        validator.validate(document)
    return lint


@pytest.fixture
def mock_db_pool():
    """Mock asyncpg pool for repository unit tests."""
    mock_conn = AsyncMock()

    @asynccontextmanager
    async def acquire():
        yield mock_conn

    mock_pool = MagicMock()
    mock_pool.acquire = acquire

    with patch("event_browser.repository.postgres.get_db_pool", AsyncMock(return_value=mock_pool)):
        yield mock_pool, mock_conn


# Pytest markers for test categorization
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, mocked)")
    config.addinivalue_line("markers", "integration: Integration tests (HTTP API against the in-memory store)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
