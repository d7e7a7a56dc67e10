"""Shared test doubles: search backends that never touch the network."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from rawsource.tools.page_fetcher import PageFetcher
from rawsource.tools.web_search import BackendResponse, SearchRotation


@dataclass
class StubBackend:
    """Backend answering from a function of the query."""

    name: str
    respond: Callable[[str], list[str]] = lambda q: []
    status: int = 200
    calls: list[str] = field(default_factory=list)

    async def attempt(self, query: str) -> BackendResponse:
        self.calls.append(query)
        ok = 200 <= self.status < 300
        return BackendResponse(
            backend=self.name,
            ok=ok,
            status=self.status,
            url=f"https://stub.test/?q={query}",
            text="<html>" + "x" * 300 + "</html>",
            links=self.respond(query) if ok else [],
        )


@dataclass
class RaisingBackend:
    name: str
    exc: Exception = field(default_factory=lambda: httpx.ConnectError("unreachable"))
    calls: int = 0

    async def attempt(self, query: str) -> BackendResponse:
        self.calls += 1
        raise self.exc


def rotation(*backends) -> SearchRotation:
    return SearchRotation(backends=list(backends), shuffle=False)


def mock_fetcher(handler: Callable[[httpx.Request], httpx.Response]) -> PageFetcher:
    return PageFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


