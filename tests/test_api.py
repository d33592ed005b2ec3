"""
Tests for the entity cache operator API.
"""

import pytest
from conftest import RecordingStore, Widget
from fastapi.testclient import TestClient

from entity_cache import EntityCacheService
from entity_cache.api.app import create_app


@pytest.fixture
def client(cache):
    """Create a test client around the wired service."""
    with TestClient(create_app(cache)) as client:
        yield client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Entity Cache API"
    assert data["entity_types"] == ["gadget", "widget"]


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "store_healthy": True}


def test_health_reports_unreachable_store(client, store):
    store.failing.add("health_check")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


def test_type_stats(client, cache):
    cache.get(Widget, 1)
    cache.get(Widget, 1)
    cache.get(Widget, 2)

    response = client.get("/stats/widget")

    assert response.status_code == 200
    data = response.json()
    assert data["entity_type"] == "widget"
    assert data["hits"] == 1
    assert data["misses"] == 2
    assert data["hit_rate"] == 0.3333


def test_all_stats_lists_tracked_types(client, cache):
    """Only types with recorded lookups appear."""
    assert client.get("/stats").json() == {"entity_types": []}

    cache.get(Widget, 1)

    data = client.get("/stats").json()
    assert [stats["entity_type"] for stats in data["entity_types"]] == ["widget"]


def test_all_stats_store_down(client, store):
    store.failing.add("get")

    response = client.get("/stats")

    assert response.status_code == 503


def test_reset_stats(client, cache):
    cache.get(Widget, 1)

    response = client.delete("/stats/widget")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get("/stats/widget").json()["misses"] == 0
    assert client.get("/stats").json() == {"entity_types": []}


def test_unknown_entity_type(client):
    assert client.get("/stats/nope").status_code == 404
    assert client.delete("/stats/nope").status_code == 404
    assert client.post("/cache/nope/warm", json={}).status_code == 404
    assert client.post("/cache/nope/invalidate", json={"ids": [1]}).status_code == 404
    assert client.delete("/cache/nope").status_code == 404


def test_warm_selected_ids(client):
    response = client.post("/cache/widget/warm", json={"ids": [1, 2, 404]})

    assert response.status_code == 200
    assert response.json() == {"entity_type": "widget", "cached": 2}


def test_warm_everything(client, source):
    response = client.post("/cache/widget/warm", json={})

    assert response.status_code == 200
    assert response.json()["cached"] == 5
    assert source.fetches == [("fetch_all", None)]


def test_warm_with_source_down(client, source):
    source.available = False

    response = client.post("/cache/widget/warm", json={"ids": [1]})

    assert response.status_code == 503


def test_invalidate_ids(client, cache, source):
    cache.get(Widget, 1)
    source.fetches.clear()

    response = client.post("/cache/widget/invalidate", json={"ids": [1]})

    assert response.status_code == 200
    assert response.json()["success"] is True
    cache.get(Widget, 1)
    assert source.fetches == [("fetch_by_id", 1)]


def test_invalidate_requires_ids(client):
    response = client.post("/cache/widget/invalidate", json={"ids": []})
    assert response.status_code == 422


def test_invalidate_all(client, cache, source):
    cache.get_many(Widget, [1, 2])
    source.fetches.clear()

    response = client.delete("/cache/widget")

    assert response.status_code == 200
    assert response.json()["success"] is True
    cache.get(Widget, 2)
    assert source.fetches == [("fetch_by_id", 2)]


def test_invalidate_all_without_tag_support(source, registry):
    service = EntityCacheService(store=RecordingStore(supports_tags=False), source=source, registry=registry)

    with TestClient(create_app(service)) as client:
        response = client.delete("/cache/widget")

    assert response.status_code == 409
