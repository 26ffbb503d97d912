"""
Pytest fixtures for mock backend tests
"""
import pytest
from typing import Any, Dict
from fastapi.testclient import TestClient

from mock_backend.config.settings import Settings
from mock_backend.main import create_app
from mock_backend.store.document_store import DocumentStore, MemoryBackend


@pytest.fixture
def sample_db() -> Dict[str, Any]:
    """Small database covering collections, numeric ids and a singular resource"""
    return {
        "users": [
            {"id": "1", "phone": "555-0100", "password": "pw1", "name": "A"},
            {"id": "2", "phone": "555-0200", "password": "pw2", "name": "B", "address": {"city": "Pune"}},
        ],
        "bookings": [
            {"id": 1, "userId": "1", "status": "confirmed", "price": 300},
            {"id": 2, "userId": "1", "status": "cancelled", "price": 100},
            {"id": 3, "userId": "2", "status": "confirmed", "price": 200},
        ],
        "payments": [],
        "settings": {"currency": "INR", "maintenance": False},
    }


@pytest.fixture
def backend(sample_db) -> MemoryBackend:
    return MemoryBackend(sample_db)


@pytest.fixture
def store(backend) -> DocumentStore:
    return DocumentStore(backend)


@pytest.fixture
def app_settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def client(store, app_settings):
    """Test client over an in-memory store"""
    app = create_app(store=store, settings=app_settings)
    with TestClient(app) as test_client:
        yield test_client
