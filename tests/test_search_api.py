"""HTTP surface: /search, /search/suggestions, /search/facets."""
from datetime import timedelta
from unittest.mock import patch

from sqlmodel import Session

from catalog.domain.exceptions import StorageUnavailable
from catalog.infra.db.seed import seed_demo_catalog
from catalog.search.executor import utcnow


def _seed_demo(engine):
    with Session(engine) as s:
        seed_demo_catalog(s, utcnow().replace(tzinfo=None))
        s.commit()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_search_example_request(client, use_test_engine):
    _seed_demo(use_test_engine)
    resp = client.post("/search", json={
        "phrase": "meditation",
        "type": "course",
        "filters": {"minPrice": 40, "maxPrice": 200, "level": "beginner"},
        "limit": 10,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["hasMore"] is False
    item = body["items"][0]
    assert item["title"] == "Mindfulness Meditation Basics"
    assert item["type"] == "course"
    assert item["relevance"] > 0
    assert "durationHours" in item and "imageUrl" in item


def test_search_all_types_camel_case(client, use_test_engine):
    _seed_demo(use_test_engine)
    body = client.post("/search", json={"limit": 3}).json()
    assert body["total"] == 8
    assert body["hasMore"] is True
    assert len(body["items"]) == 3
    assert {i["relevance"] for i in body["items"]} == {1.0}


def test_search_events_expose_venue(client, use_test_engine):
    _seed_demo(use_test_engine)
    body = client.post("/search", json={"type": "event", "filters": {"city": "barcelona"}}).json()
    assert [i["venueCity"] for i in body["items"]] == ["Barcelona"]
    assert "eventDate" in body["items"][0]


def test_search_spanish_fallback(client, use_test_engine):
    _seed_demo(use_test_engine)
    body = client.post("/search", json={"phrase": "chakra", "type": "course", "locale": "es"}).json()
    assert [i["title"] for i in body["items"]] == ["Advanced Chakra Healing"]


def test_invalid_limit_is_400(client):
    resp = client.post("/search", json={"limit": 0})
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidRequest"


def test_invalid_filter_is_400_and_names_filter(client):
    resp = client.post("/search", json={"type": "course", "filters": {"level": "guru"}})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "InvalidFilterValue"
    assert body["filter"] == "level"


def test_unsupported_locale_is_400(client):
    resp = client.post("/search", json={"locale": "fr"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnsupportedLocale"


def test_unknown_type_is_422(client):
    assert client.post("/search", json={"type": "podcast"}).status_code == 422


def test_storage_failure_is_503(client):
    with patch(
        "catalog.infra.db.repositories.search_repository.SearchRepository.count",
        side_effect=StorageUnavailable("Catalog storage unavailable: OperationalError"),
    ):
        resp = client.post("/search", json={"type": "course"})
    assert resp.status_code == 503
    assert resp.json()["error"] == "StorageUnavailable"


def test_request_id_round_trip(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]


def test_suggestions(client, use_test_engine):
    _seed_demo(use_test_engine)
    body = client.get("/search/suggestions", params={"q": "chakra"}).json()
    assert body == {"items": ["Advanced Chakra Healing", "The Chakra Handbook"]}


def test_suggestions_short_query_is_empty(client, use_test_engine):
    _seed_demo(use_test_engine)
    assert client.get("/search/suggestions", params={"q": "c"}).json() == {"items": []}


def test_suggestions_limit_bounds(client):
    assert client.get("/search/suggestions", params={"q": "yoga", "limit": 0}).status_code == 400


def test_facets(client, use_test_engine):
    _seed_demo(use_test_engine)
    body = client.get("/search/facets").json()
    assert body["levels"] == ["advanced", "beginner", "intermediate"]
    assert body["productTypes"] == ["audio", "ebook"]
    assert body["priceRange"] == {"min": 14.99, "max": 320.0}

    courses = client.get("/search/facets", params={"type": "course"}).json()
    assert courses["priceRange"] == {"min": 39.99, "max": 149.99}


def test_unsupported_isolation_level_is_503(client, monkeypatch):
    from catalog.config import settings
    monkeypatch.setattr(settings, "SEARCH_ISOLATION_LEVEL", "READ COMMITTED")
    resp = client.post("/search", json={})
    assert resp.status_code == 503
    assert resp.json()["error"] == "StorageUnavailable"
