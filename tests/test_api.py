"""Tests for the HTTP API."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import StubBackend, mock_fetcher, rotation
from rawsource.api.app import create_app
from rawsource.api.serve import uvicorn_options
from rawsource.config import Settings
from rawsource.orchestrator.aggregator import MatchAggregator
from rawsource.orchestrator.resolver import TitleResolver
from rawsource.orchestrator.runner import Pipeline


def _respond(query: str) -> list[str]:
    if query == '"万相之王" site:69shuba.com':
        return ["https://www.69shuba.com/book/12345.htm"]
    return ["https://unrelated.test/"]


def _client(policy: str = "resolve") -> TestClient:
    search = rotation(StubBackend("b", respond=_respond))
    pipeline = Pipeline(
        resolver=TitleResolver(
            search=search,
            fetcher=mock_fetcher(lambda request: httpx.Response(404)),
        ),
        aggregator=MatchAggregator(search=search),
        english_policy=policy,
    )
    return TestClient(create_app(Settings(log_level="WARNING"), pipeline=pipeline))


@pytest.fixture
def client():
    with _client() as c:
        yield c


def test_search_returns_matches_with_cors(client: TestClient) -> None:
    resp = client.get("/search", params={"q": "万相之王"})

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"
    body = resp.json()
    assert body["query"] == "万相之王"
    assert body["rawTitle"] is None
    assert body["notFound"] is False
    assert body["matches"][0]["serieId"] == "12345"
    assert "debug" not in body


def test_search_debug_flag(client: TestClient) -> None:
    body = client.get("/search", params={"q": "万相之王", "debug": "1"}).json()
    assert len(body["debug"]) == 16


def test_search_not_found(client: TestClient) -> None:
    body = client.get("/search", params={"q": "Reverend Insanity"}).json()
    assert body["notFound"] is True
    assert body["matches"] == []
    assert body["nu"]["resolved"] is False


def test_missing_query_is_400(client: TestClient) -> None:
    resp = client.get("/search")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing q"}
    assert resp.headers["access-control-allow-origin"] == "*"

    assert client.get("/search", params={"q": "  "}).status_code == 400


def test_english_rejected_under_reject_policy() -> None:
    with _client(policy="reject") as c:
        resp = c.get("/search", params={"q": "Reverend Insanity"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "English input not accepted"
    assert "raw" in body["message"]


def test_options_preflight_is_204(client: TestClient) -> None:
    resp = client.options("/search")
    assert resp.status_code == 204
    assert resp.headers["access-control-allow-methods"] == "GET,OPTIONS"
    assert resp.headers["access-control-allow-headers"] == "Content-Type"


def test_unknown_path_is_404(client: TestClient) -> None:
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.headers["access-control-allow-origin"] == "*"


def test_sources_and_detect(client: TestClient) -> None:
    sources = client.get("/sources").json()
    assert len(sources) == 16
    assert sources[0] == {
        "source": "fanqienovel",
        "domain": "fanqienovel.com",
        "pattern": r"https?://fanqienovel\.com/page/(\d+)",
        "canonicalTemplate": "https://fanqienovel.com/page/{id}",
    }

    detected = client.get("/detect", params={"url": "https://twkan.com/book/5.html"}).json()
    assert detected == {
        "matched": True,
        "source": "twkan",
        "serieId": "5",
        "foundUrl": "https://twkan.com/book/5.html",
        "canonicalUrl": "https://twkan.com/book/5.html",
    }
    assert client.get("/detect", params={"url": "https://x.test/"}).json() == {"matched": False}


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


class _BrokenPipeline:
    async def run_payload(self, query, *, debug=False):
        raise RuntimeError("unexpected")


def test_unhandled_error_is_500_with_cors() -> None:
    app = create_app(Settings(log_level="WARNING"), pipeline=_BrokenPipeline())  # type: ignore[arg-type]
    with TestClient(app) as c:
        resp = c.get("/search", params={"q": "万相之王"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal error"}
    assert resp.headers["access-control-allow-origin"] == "*"


def test_serve_options_prefer_explicit_values() -> None:
    settings = Settings(api_host="127.0.0.1", api_port=9000, log_level="DEBUG")

    assert uvicorn_options(settings) == {
        "host": "127.0.0.1",
        "port": 9000,
        "reload": False,
        "log_level": "debug",
        "log_config": None,
    }
    assert uvicorn_options(settings, host="0.0.0.0", port=8080)["port"] == 8080
