"""HTTP tests for the Shrine API application factory."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.shrine_api import create_app
from backend.shrine_api.services import ShrineCache, build_pipeline
from backend.shrine_api.settings import ShrineSettings

SHRINE_URL = "https://mirror-a.test/api/shrine"
BACKUP_URL = "https://mirror-b.test/api/shrine"
CATALOG_URL = "https://catalog.test/api/perks"
TTL = 60 * 60 * 24 * 7

SHRINE_PAYLOAD = {
    "id": 301,
    "perks": [
        {"id": "k28p02", "icon": "/icons/a.png", "shards": 2700},
        {"id": "nemesis", "name": "Nemesis", "image": "http://full/url.png"},
    ],
}


def _settings(tmp_path: Path, **overrides) -> ShrineSettings:
    values = {
        "shrine_source": "",
        "default_sources": [SHRINE_URL, BACKUP_URL],
        "catalog_sources": [CATALOG_URL],
        "snapshot_path": str(tmp_path / "data" / "shrine.json"),
        "warm_on_startup": False,
        "background_refresh": False,
    }
    values.update(overrides)
    return ShrineSettings(**values)


def _client(tmp_path: Path, upstream, clock=None, **overrides) -> TestClient:
    settings = _settings(tmp_path, **overrides)
    app = create_app(settings=settings, transport=upstream.transport)
    if clock is not None:
        app.state.app_state.cache = ShrineCache(
            build_pipeline(settings, transport=upstream.transport),
            ttl_seconds=settings.cache_ttl_seconds,
            clock=clock,
        )
    return TestClient(app)


@pytest.fixture()
def healthy(upstream):
    upstream.json(SHRINE_URL, SHRINE_PAYLOAD)
    upstream.json(CATALOG_URL, {"data": [{"id": "nemesis", "description": "Obsession"}]})
    return upstream


def test_health_on_cold_cache(tmp_path: Path, upstream) -> None:
    client = _client(tmp_path, upstream)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "cacheAgeMs": None,
        "cached": False,
        "source": "none",
    }
    assert upstream.calls == []


def test_shrine_returns_enriched_snapshot(tmp_path: Path, healthy) -> None:
    client = _client(tmp_path, healthy)

    response = client.get("/shrine")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {
        "fetchedAt",
        "sourceUsed",
        "sourceTried",
        "data",
        "perksWithImages",
        "images",
    }
    assert body["sourceUsed"] == SHRINE_URL
    assert body["data"] == SHRINE_PAYLOAD
    darkness, nemesis = body["perksWithImages"]
    assert darkness["name"] == "Darkness Revealed"
    assert darkness["image"] == "https://dbd.tricky.lol/icons/a.png"
    assert nemesis["description"] == "Obsession"
    assert nemesis["image"] == "http://full/url.png"
    assert body["images"] == [
        {"name": "Darkness Revealed", "image": "https://dbd.tricky.lol/icons/a.png"},
        {"name": "Nemesis", "image": "http://full/url.png"},
    ]

    health = client.get("/health").json()
    assert health["cached"] is True
    assert health["source"] == "cache"
    assert isinstance(health["cacheAgeMs"], int)


def test_cached_snapshot_is_reused_within_ttl(tmp_path: Path, healthy, clock) -> None:
    client = _client(tmp_path, healthy, clock=clock)

    first = client.get("/shrine").json()
    clock.advance(TTL - 1)
    second = client.get("/shrine").json()

    assert first == second
    assert healthy.count(SHRINE_URL) == 1
    assert healthy.count(CATALOG_URL) == 1


def test_all_sources_down_on_cold_cache_returns_fallback(tmp_path: Path, upstream) -> None:
    upstream.status(SHRINE_URL, 503)
    upstream.status(BACKUP_URL, 503)
    client = _client(tmp_path, upstream)

    response = client.get("/shrine")

    assert response.status_code == 200
    assert response.json() == {
        "source": "fallback",
        "lastUpdated": None,
        "perks": [],
        "error": "Upstream fetch failed",
    }
    assert client.get("/health").json()["cached"] is False


def test_refresh_failure_serves_stale_snapshot(tmp_path: Path, healthy, clock) -> None:
    client = _client(tmp_path, healthy, clock=clock)
    warm = client.get("/shrine").json()

    clock.advance(TTL + 1)
    healthy.status(SHRINE_URL, 503)
    healthy.status(BACKUP_URL, 503)
    response = client.get("/shrine")

    assert response.status_code == 200
    assert response.headers["X-Shrine-Stale"] == "true"
    assert response.json() == warm


def test_refresh_failure_is_strict_when_stale_serving_disabled(
    tmp_path: Path, healthy, clock
) -> None:
    client = _client(tmp_path, healthy, clock=clock, serve_stale_on_error=False)
    client.get("/shrine")

    clock.advance(TTL + 1)
    healthy.error(SHRINE_URL)
    healthy.status(BACKUP_URL, 500)
    response = client.get("/shrine")

    assert response.status_code == 500
    assert response.json() == {"error": "Could not fetch shrine data"}
    assert client.get("/health").json()["cached"] is True


def test_shrine_file_missing_returns_404(tmp_path: Path, upstream) -> None:
    client = _client(tmp_path, upstream)

    response = client.get("/shrine.json")

    assert response.status_code == 404
    assert response.json() == {"error": "shrine.json not generated yet"}


def test_shrine_file_is_served_verbatim(tmp_path: Path, upstream) -> None:
    snapshot_path = tmp_path / "data" / "shrine.json"
    snapshot_path.parent.mkdir(parents=True)
    raw = json.dumps({"fetchedAt": "2024-05-07T00:00:00Z", "perksWithImages": []}, indent=2)
    snapshot_path.write_text(raw, encoding="utf-8")
    client = _client(tmp_path, upstream)

    response = client.get("/shrine.json")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.text == raw
    assert upstream.calls == []


def test_shrine_file_read_error_returns_500(tmp_path: Path, upstream) -> None:
    # A directory in place of the file cannot be read as bytes.
    (tmp_path / "data" / "shrine.json").mkdir(parents=True)
    client = _client(tmp_path, upstream)

    response = client.get("/shrine.json")

    assert response.status_code == 500
    assert response.json() == {"error": "Could not read shrine.json"}


def test_lifespan_warms_cache_on_startup(tmp_path: Path, healthy) -> None:
    settings = _settings(tmp_path, warm_on_startup=True)
    app = create_app(settings=settings, transport=healthy.transport)

    with TestClient(app) as client:
        app.state.app_state.refresher.join(timeout=5)
        health = client.get("/health").json()

    assert health["cached"] is True
    assert healthy.count(SHRINE_URL) == 1


def test_malformed_operator_source_falls_back_to_next_source(tmp_path: Path, healthy) -> None:
    client = _client(tmp_path, healthy, shrine_source=f"http://[::1,{SHRINE_URL}")

    response = client.get("/shrine")

    assert response.status_code == 200
    body = response.json()
    assert body["sourceUsed"] == SHRINE_URL
    assert body["sourceTried"] == ["http://[::1", SHRINE_URL]


def test_malformed_sources_on_cold_cache_return_json_fallback(tmp_path: Path, upstream) -> None:
    client = _client(
        tmp_path,
        upstream,
        shrine_source="http://[::1",
        catalog_sources=["http://[::1"],
    )

    response = client.get("/shrine")

    assert response.status_code == 200
    assert response.json()["source"] == "fallback"
    assert response.json()["error"] == "Upstream fetch failed"


def test_malformed_catalog_source_degrades_to_image_only(tmp_path: Path, upstream) -> None:
    upstream.json(SHRINE_URL, SHRINE_PAYLOAD)
    client = _client(tmp_path, upstream, catalog_sources=["http://[::1"])

    response = client.get("/shrine")

    assert response.status_code == 200
    darkness = response.json()["perksWithImages"][0]
    assert "name" not in darkness
    assert darkness["image"] == "https://dbd.tricky.lol/icons/a.png"
