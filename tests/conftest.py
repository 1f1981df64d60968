from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from salesforce_service.config import Settings
from salesforce_service.main import create_app
from salesforce_service.storage import InMemoryDocumentStore


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        storage_backend="memory",
        jwt_secret="test-secret",
        jwt_issuer="salesforce.test",
        request_timeout_ms=5000,
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def api_client(settings, store):
    """Provide a FastAPI test client backed by an isolated in-memory store."""
    app = create_app(settings, store=store)
    with TestClient(app) as client:
        yield client
