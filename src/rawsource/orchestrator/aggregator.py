"""Search every known source for a raw title and collect confirmed matches."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from rawsource.core.concurrency import gather_ordered
from rawsource.logging import get_logger, log_exception, set_source
from rawsource.models.match import Match
from rawsource.models.response import SourceDiagnostic
from rawsource.models.search import AttemptDiagnostic
from rawsource.sources.registry import SourceDefinition, list_sources
from rawsource.tools.web_search import SearchRotation

logger = get_logger(__name__)

LookupStatus = Literal["matched", "no_match", "search_failed", "skipped", "error"]


def build_source_query(raw_title: str, domain: str) -> str:
    return f'"{raw_title}" site:{domain}'


@dataclass(frozen=True)
class LookupOutcome:
    """Result of looking one source up.

    Only `matched` outcomes carry a match; the other statuses are kept apart for logging
    and diagnostics.
    """

    source: SourceDefinition
    status: LookupStatus
    query: str = ""
    match: Match | None = None
    attempts: list[AttemptDiagnostic] = field(default_factory=list)
    error: str | None = None

    def diagnostic(self) -> SourceDiagnostic:
        return SourceDiagnostic(
            source=self.source.source_id,
            domain=self.source.domain,
            query=self.query,
            status=self.status,
            attempts=self.attempts,
            error=self.error,
        )


def dedupe_matches(matches: Iterable[Match]) -> list[Match]:
    """Drop matches whose canonical URL was already seen; first occurrence wins."""

    seen: set[str] = set()
    out: list[Match] = []
    for m in matches:
        if m.canonical_url in seen:
            continue
        seen.add(m.canonical_url)
        out.append(m)
    return out


@dataclass
class MatchAggregator:
    """Fan one search out per registry entry and join the results in registry order."""

    search: SearchRotation
    sources: Sequence[SourceDefinition] = field(default_factory=list_sources)
    max_concurrent: int = 16

    async def lookup(self, source: SourceDefinition, raw_title: str, *, debug: bool = False) -> LookupOutcome:
        """Look `raw_title` up on a single source. Never raises."""

        set_source(source.source_id)
        if not source.domain:
            return LookupOutcome(source=source, status="skipped")

        query = build_source_query(raw_title, source.domain)
        try:
            outcome = await self.search.search(query, debug=debug)
            if not outcome.ok:
                return LookupOutcome(
                    source=source, status="search_failed", query=query, attempts=outcome.diagnostics
                )
            for url in outcome.result_urls:
                match = source.match_url(url)
                if match is not None:
                    return LookupOutcome(
                        source=source,
                        status="matched",
                        query=query,
                        match=match,
                        attempts=outcome.diagnostics,
                    )
            return LookupOutcome(source=source, status="no_match", query=query, attempts=outcome.diagnostics)
        except Exception as e:
            log_exception(logger, "Lookup failed", source=source.source_id, query=query)
            return LookupOutcome(source=source, status="error", query=query, error=f"{type(e).__name__}: {e}")

    async def lookup_all(self, raw_title: str, *, debug: bool = False) -> list[LookupOutcome]:
        """Run every source lookup concurrently; outcomes follow registry order."""

        return await gather_ordered(
            [lambda s=s: self.lookup(s, raw_title, debug=debug) for s in self.sources],
            max_concurrent=self.max_concurrent,
        )

    @staticmethod
    def collect(outcomes: Iterable[LookupOutcome]) -> list[Match]:
        return dedupe_matches(o.match for o in outcomes if o.status == "matched" and o.match is not None)

    async def find_matches(self, raw_title: str) -> list[Match]:
        """Return deduplicated matches for `raw_title`; empty means not found."""

        outcomes = await self.lookup_all(raw_title)
        return self.collect(outcomes)
