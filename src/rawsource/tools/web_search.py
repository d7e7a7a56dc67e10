"""Search backend abstraction with ordered fallback.

No single public search endpoint stays reliable for long (rate limits, blocking, layout
changes), so every query goes through a :class:`SearchRotation`: an ordered list of
interchangeable backends tried one after another until one yields usable result links.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol
from urllib.parse import quote

import httpx
from duckduckgo_search import DDGS
from duckduckgo_search.exceptions import DuckDuckGoSearchException

from rawsource.config import Settings
from rawsource.logging import get_logger
from rawsource.models.search import AttemptDiagnostic, SearchOutcome
from rawsource.tools.link_extractor import (
    extract_html_links,
    extract_json_links,
    extract_text_links,
)

logger = get_logger(__name__)

PREVIEW_CHARS = 140


class SearchBackendError(RuntimeError):
    """A backend attempt failed in an expected way, e.g. rate limiting."""


@dataclass(frozen=True)
class BackendResponse:
    """Raw outcome of a single backend attempt."""

    backend: str
    ok: bool
    status: int | None
    url: str | None
    text: str
    links: list[str] = field(default_factory=list)

    def diagnostic(self) -> AttemptDiagnostic:
        return AttemptDiagnostic(
            backend=self.backend,
            ok=self.ok,
            status=self.status,
            url=self.url,
            len=len(self.text),
            head=self.text[:PREVIEW_CHARS],
            links=len(self.links),
        )


class SearchBackend(Protocol):
    """Search backend interface."""

    name: str

    async def attempt(self, query: str) -> BackendResponse:
        """Issue one bounded request for `query`."""


@dataclass(frozen=True)
class HttpSearchBackend:
    """A search surface reachable by a single HTTP GET.

    `url_template` must contain a `{query}` placeholder; the query is percent-encoded.
    """

    name: str
    client: httpx.AsyncClient
    url_template: str
    origin: str
    payload: Literal["html", "json"] = "html"

    def build_url(self, query: str) -> str:
        return self.url_template.format(query=quote(query, safe=""))

    def extract(self, text: str) -> list[str]:
        if self.payload == "json":
            return extract_json_links(text)
        return extract_html_links(text, self.origin, external_only=True)

    async def attempt(self, query: str) -> BackendResponse:
        url = self.build_url(query)
        resp = await self.client.get(url)
        text = resp.text
        ok = resp.is_success
        return BackendResponse(
            backend=self.name,
            ok=ok,
            status=resp.status_code,
            url=str(resp.url),
            text=text,
            links=self.extract(text) if ok else [],
        )


@dataclass(frozen=True)
class ProxiedSearchBackend:
    """Re-issue another backend's request through a text-extraction proxy.

    The proxy returns the page as plain text/markdown, so links are read as bare URLs.
    """

    inner: HttpSearchBackend
    client: httpx.AsyncClient
    proxy_base_url: str = "https://r.jina.ai/"

    @property
    def name(self) -> str:
        return f"proxy:{self.inner.name}"

    async def attempt(self, query: str) -> BackendResponse:
        url = self.proxy_base_url + self.inner.build_url(query)
        resp = await self.client.get(url)
        text = resp.text
        ok = resp.is_success
        return BackendResponse(
            backend=self.name,
            ok=ok,
            status=resp.status_code,
            url=str(resp.url),
            text=text,
            links=extract_text_links(text, self.inner.origin, external_only=True) if ok else [],
        )


@dataclass(frozen=True)
class DuckDuckGoSearchBackend:
    """DuckDuckGo via the `duckduckgo_search` library, run in a worker thread."""

    max_results: int = 20
    name: str = "duckduckgo_api"

    def _search_sync(self, query: str) -> list[str]:
        urls: list[str] = []
        try:
            with DDGS() as ddgs:
                results = ddgs.text(query, max_results=self.max_results) or []
                for r in results:
                    if not isinstance(r, dict):
                        raise SearchBackendError(f"Unexpected result record: {type(r).__name__}")
                    url = r.get("href") or r.get("url")
                    if url:
                        urls.append(url)
        except DuckDuckGoSearchException as e:
            raise SearchBackendError(f"{type(e).__name__}: {e}") from e
        return urls

    async def attempt(self, query: str) -> BackendResponse:
        links = await asyncio.to_thread(self._search_sync, query)
        return BackendResponse(
            backend=self.name,
            ok=True,
            status=None,
            url=None,
            text="\n".join(links),
            links=list(dict.fromkeys(links)),
        )


def accept(resp: BackendResponse) -> bool:
    """A response is usable when it succeeded and produced at least one external link."""

    return resp.ok and bool(resp.links)


@dataclass
class SearchRotation:
    """Try backends in turn; the first acceptable response wins.

    Notes:
        - Order is shuffled per call when `shuffle` is set, to spread load.
        - There is no per-backend retry loop; moving on to the next backend replaces it.
        - :meth:`search` never raises. Exhausting every backend yields ``ok=False``.
    """

    backends: Sequence[SearchBackend]
    shuffle: bool = True
    attempt_timeout_s: float | None = None
    rng: random.Random = field(default_factory=random.Random)

    def _ordered(self) -> list[SearchBackend]:
        order = list(self.backends)
        if self.shuffle:
            self.rng.shuffle(order)
        return order

    async def _attempt(self, backend: SearchBackend, query: str) -> BackendResponse:
        if self.attempt_timeout_s is None:
            return await backend.attempt(query)
        return await asyncio.wait_for(backend.attempt(query), timeout=self.attempt_timeout_s)

    async def search(self, query: str, *, debug: bool = False) -> SearchOutcome:
        """Search `query` across the rotation.

        Args:
            query: Full search query (already quoted / site-restricted).
            debug: Record a diagnostic entry per attempted backend.

        Returns:
            The outcome; `result_urls` is empty unless `ok`.
        """

        diagnostics: list[AttemptDiagnostic] = []
        started = time.monotonic()

        for backend in self._ordered():
            attempt_started = time.monotonic()
            try:
                resp = await self._attempt(backend, query)
            except (httpx.HTTPError, asyncio.TimeoutError, SearchBackendError) as e:
                logger.warning(
                    "Search attempt failed",
                    extra={
                        "provider": backend.name,
                        "query_len": len(query),
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                if debug:
                    diagnostics.append(
                        AttemptDiagnostic(backend=backend.name, ok=False, error=f"{type(e).__name__}: {e}")
                    )
                continue
            except Exception as e:
                logger.exception("Search backend %s crashed for query=%s", backend.name, query)
                if debug:
                    diagnostics.append(
                        AttemptDiagnostic(backend=backend.name, ok=False, error=f"{type(e).__name__}: {e}")
                    )
                continue

            if debug:
                diagnostics.append(resp.diagnostic())

            logger.debug(
                "Search attempt done",
                extra={
                    "provider": backend.name,
                    "status_code": resp.status,
                    "result_count": len(resp.links),
                    "latency_ms": int((time.monotonic() - attempt_started) * 1000),
                },
            )
            if accept(resp):
                return SearchOutcome(
                    ok=True,
                    result_urls=resp.links,
                    backend=backend.name,
                    diagnostics=diagnostics,
                )

        logger.info(
            "Search exhausted all backends",
            extra={
                "query_len": len(query),
                "backends": len(self.backends),
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return SearchOutcome(ok=False, result_urls=[], diagnostics=diagnostics)


DUCKDUCKGO_LITE = ("https://lite.duckduckgo.com/lite/?q={query}", "https://lite.duckduckgo.com/")
DUCKDUCKGO_HTML = ("https://html.duckduckgo.com/html/?q={query}", "https://html.duckduckgo.com/")


def _html_backend(name: str, client: httpx.AsyncClient) -> HttpSearchBackend:
    if name == "duckduckgo_lite":
        template, origin = DUCKDUCKGO_LITE
    elif name == "duckduckgo_html":
        template, origin = DUCKDUCKGO_HTML
    else:
        raise ValueError(f"Unknown HTML search backend: {name}")
    return HttpSearchBackend(name=name, client=client, url_template=template, origin=origin)


def _searxng_backends(settings: Settings, client: httpx.AsyncClient) -> list[HttpSearchBackend]:
    backends: list[HttpSearchBackend] = []
    for base in settings.searxng_instances:
        base = base.rstrip("/")
        backends.append(
            HttpSearchBackend(
                name=f"searxng:{base}",
                client=client,
                url_template=base + "/search?q={query}&format=json",
                origin=base + "/",
                payload="json",
            )
        )
    return backends


def build_backends(settings: Settings, client: httpx.AsyncClient) -> list[SearchBackend]:
    """Instantiate the configured backends in declaration order.

    Names: `duckduckgo_lite`, `duckduckgo_html`, `searxng` (one per configured instance),
    `duckduckgo_api`, and `proxy:<html backend>`.
    """

    backends: list[SearchBackend] = []
    for name in settings.search_backends:
        if name == "searxng":
            backends.extend(_searxng_backends(settings, client))
        elif name == "duckduckgo_api":
            backends.append(DuckDuckGoSearchBackend(max_results=settings.search_max_results))
        elif name.startswith("proxy:"):
            inner = _html_backend(name.split(":", 1)[1], client)
            backends.append(
                ProxiedSearchBackend(inner=inner, client=client, proxy_base_url=settings.text_proxy_base_url)
            )
        else:
            backends.append(_html_backend(name, client))
    if not backends:
        raise ValueError("No usable search backends configured (RAWSOURCE_SEARCH_BACKENDS).")
    return backends


def get_search_rotation(settings: Settings, client: httpx.AsyncClient) -> SearchRotation:
    """Factory to create the search rotation based on settings."""

    if settings.search_strategy == "direct_then_proxy":
        direct = _html_backend("duckduckgo_lite", client)
        proxied = ProxiedSearchBackend(inner=direct, client=client, proxy_base_url=settings.text_proxy_base_url)
        return SearchRotation(
            backends=[direct, proxied],
            shuffle=False,
            attempt_timeout_s=settings.search_attempt_timeout_s,
        )

    return SearchRotation(
        backends=build_backends(settings, client),
        shuffle=settings.search_shuffle,
        attempt_timeout_s=settings.search_attempt_timeout_s,
    )
