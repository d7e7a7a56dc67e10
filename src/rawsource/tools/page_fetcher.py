"""Page fetching utilities."""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx

from rawsource.config import Settings
from rawsource.logging import get_logger

logger = get_logger(__name__)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared async HTTP client used by fetchers and search backends."""

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_s),
        headers={
            "User-Agent": settings.http_user_agent,
            "Accept-Language": settings.http_accept_language,
        },
        follow_redirects=True,
    )


@dataclass(frozen=True)
class FetchedText:
    """Fetched page payload."""

    url: str
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class PageFetcher:
    """Fetch pages over HTTP, best-effort."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str) -> FetchedText:
        """Fetch a URL; raises on transport errors."""

        resp = await self._client.get(url)
        return FetchedText(url=str(resp.url), status=resp.status_code, text=resp.text)

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL as text.

        Any transport error or non-success status yields an empty string.
        """

        started = time.monotonic()
        try:
            page = await self.fetch(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "Page fetch failed",
                extra={"url": url, "error_type": type(e).__name__, "error": str(e)},
            )
            return ""

        logger.debug(
            "Page fetched",
            extra={
                "url": url,
                "status_code": page.status,
                "length": len(page.text),
                "latency_ms": int((time.monotonic() - started) * 1000),
            },
        )
        if not page.ok:
            return ""
        return page.text
