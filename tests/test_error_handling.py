"""Tests for error handling in the ZidRec API.

Recommendations are supplementary: an unreachable Zid API, a broken cache
file or a failed cache write must degrade to empty results, never to an
error response. Errors that do escape are rendered with a consistent body.
"""

import logging
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from zidrec.api.deps import get_recommender, get_snapshot_manager
from zidrec.api.exceptions import ProviderError, SnapshotStoreError, ZidRecException
from zidrec.api.main import app
from zidrec.recommender.snapshot import SnapshotManager
from zidrec.recommender.store import JsonSnapshotStore

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)


class FailingZidClient:
    """Zid client whose every call fails like an unreachable API."""

    def __init__(self):
        self.calls = 0

    def fetch_products(self, page=1, page_size=50):
        self.calls += 1
        raise ProviderError("/v1/products/", ConnectionError("connection refused"))

    def fetch_orders(self, page=1, page_size=50):
        self.calls += 1
        raise ProviderError("/v1/managers/store/orders", TimeoutError("timed out"))


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_unreachable_api_returns_empty_results(client, tmp_path):
    """Test that an unreachable API yields [] rather than an error."""
    manager = SnapshotManager(
        JsonSnapshotStore(str(tmp_path / "cache.json")), FailingZidClient()
    )
    app.dependency_overrides[get_snapshot_manager] = lambda: manager

    product = client.get("/api/recommendations/product?product_id=1")
    cart = client.post("/api/recommendations/cart", json={"product_ids": [1, 2]})

    assert product.status_code == 200
    assert product.json() == []
    assert cart.status_code == 200
    assert cart.json() == []
    assert manager.current.source == "empty"


def test_unreachable_api_loads_once(client, tmp_path):
    """Test that a failed load is not retried on every request."""
    failing = FailingZidClient()
    manager = SnapshotManager(JsonSnapshotStore(str(tmp_path / "cache.json")), failing)
    app.dependency_overrides[get_snapshot_manager] = lambda: manager

    for _ in range(3):
        client.get("/api/recommendations/product?product_id=1")

    assert failing.calls == 2


def test_corrupt_cache_file_returns_empty_results(client, tmp_path):
    """Test that a corrupt cache file with no provider yields []."""
    cache_path = tmp_path / "cache.json"
    cache_path.write_text("{\"products\": [", encoding="utf-8")
    manager = SnapshotManager(JsonSnapshotStore(str(cache_path)), client=None)
    app.dependency_overrides[get_snapshot_manager] = lambda: manager

    response = client.get("/api/recommendations/product?product_id=1")

    assert response.status_code == 200
    assert response.json() == []


def test_zidrec_exception_rendering(client):
    """Test that escaped ZidRec errors use the error response structure."""

    def broken_recommender():
        raise ProviderError("/v1/products/", RuntimeError("boom"))

    app.dependency_overrides[get_recommender] = broken_recommender

    response = client.get("/api/recommendations/product?product_id=1")

    assert response.status_code == 502
    data = response.json()
    assert data["error"] == "ProviderError"
    assert "boom" in data["message"]
    assert data["details"]["error_type"] == "RuntimeError"


def test_exception_hierarchy():
    """Test status codes and details of the exception types."""
    provider_error = ProviderError("/v1/products/", ValueError("bad json"))
    store_error = SnapshotStoreError("storage/cache.json", OSError("read-only"))

    assert isinstance(provider_error, ZidRecException)
    assert isinstance(store_error, ZidRecException)
    assert provider_error.status_code == 502
    assert store_error.status_code == 500
    assert store_error.details["cache_path"] == "storage/cache.json"
    assert ZidRecException("plain").details == {}


def test_health_check_not_affected_by_data_errors(client, tmp_path):
    """Test that /ping and /status work even when loading fails."""
    manager = SnapshotManager(
        JsonSnapshotStore(str(tmp_path / "cache.json")), FailingZidClient()
    )
    app.dependency_overrides[get_snapshot_manager] = lambda: manager

    assert client.get("/ping").json() == {"status": "ok"}
    assert client.get("/status").json()["loaded"] is False
