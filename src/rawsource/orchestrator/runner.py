"""End-to-end pipeline runner."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from rawsource.caching import ResponseCache, cache_key, get_response_cache
from rawsource.config import Settings
from rawsource.logging import get_logger, request_context
from rawsource.models.resolution import ResolvedTitle
from rawsource.models.response import PipelineResponse
from rawsource.orchestrator.aggregator import MatchAggregator
from rawsource.orchestrator.resolver import TitleResolver
from rawsource.sources.registry import list_sources
from rawsource.tools.page_fetcher import PageFetcher
from rawsource.tools.web_search import get_search_rotation
from rawsource.utils.text import looks_english

logger = get_logger(__name__)


class PipelineError(ValueError):
    """Input rejected before any lookup was made."""

    error = "Invalid request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.error)
        self.message = message


class InvalidQueryError(PipelineError):
    error = "Missing q"


class EnglishInputRejectedError(PipelineError):
    error = "English input not accepted"


@dataclass
class Pipeline:
    """Resolve a title, then search every known source for it.

    `english_policy` selects how predominantly-ASCII input is treated: "resolve" looks the
    raw title up first, "reject" refuses it and expects the caller to send a raw title.
    """

    resolver: TitleResolver
    aggregator: MatchAggregator
    english_policy: Literal["resolve", "reject"] = "resolve"
    cache: ResponseCache | None = None

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> Pipeline:
        search = get_search_rotation(settings, client)
        resolver = TitleResolver(
            search=search,
            fetcher=PageFetcher(client),
            window_chars=settings.index_window_chars,
            max_names=settings.index_max_names,
        )
        aggregator = MatchAggregator(
            search=search,
            sources=list_sources(),
            max_concurrent=settings.search_max_concurrency,
        )
        return cls(
            resolver=resolver,
            aggregator=aggregator,
            english_policy=settings.english_policy,
            cache=get_response_cache(settings),
        )

    def validate(self, query: str | None) -> str:
        q = (query or "").strip()
        if not q:
            raise InvalidQueryError()
        if self.english_policy == "reject" and looks_english(q):
            raise EnglishInputRejectedError(
                "Input looks like an English title. Send the raw (original-language) title instead."
            )
        return q

    async def run(self, query: str | None, *, debug: bool = False) -> PipelineResponse:
        """Run the pipeline for one query.

        Raises:
            InvalidQueryError: The query is missing or blank.
            EnglishInputRejectedError: English input under the "reject" policy.
        """

        q = self.validate(query)

        nu = ResolvedTitle.unresolved()
        raw_title = q
        if self.english_policy == "resolve" and self.resolver.needs_resolution(q):
            nu = await self.resolver.resolve(q, debug=debug)
            if nu.raw_title:
                raw_title = nu.raw_title

        outcomes = await self.aggregator.lookup_all(raw_title, debug=debug)
        matches = self.aggregator.collect(outcomes)

        logger.info(
            "Pipeline done",
            extra={
                "resolved": nu.resolved,
                "matches": len(matches),
                "statuses": {o.source.source_id: o.status for o in outcomes},
            },
        )
        return PipelineResponse(
            query=q,
            raw_title=raw_title if raw_title != q else None,
            nu=nu,
            matches=matches,
            debug=[o.diagnostic() for o in outcomes] if debug else None,
        )

    async def run_payload(self, query: str | None, *, debug: bool = False) -> dict[str, Any]:
        """Run the pipeline and return the JSON payload, consulting the cache."""

        with request_context(request_id=uuid.uuid4().hex[:12]):
            q = self.validate(query)
            key = cache_key(q, debug=debug)
            cached = await self._cache_get(key) if not debug else None
            if cached is not None:
                logger.info("Cache hit", extra={"key": key})
                return cached

            payload = (await self.run(q, debug=debug)).to_payload()
            if not debug:
                await self._cache_put(key, payload)
            return payload

    async def _cache_get(self, key: str) -> dict[str, Any] | None:
        if self.cache is None:
            return None
        try:
            return await asyncio.to_thread(self.cache.get, key)
        except Exception as e:
            logger.warning("Cache read failed: %s", e)
            return None

    async def _cache_put(self, key: str, payload: dict[str, Any]) -> None:
        if self.cache is None:
            return
        try:
            await asyncio.to_thread(self.cache.put, key, payload)
        except Exception as e:
            logger.warning("Cache write failed: %s", e)
