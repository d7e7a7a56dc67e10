"""Resolve an English title to its raw (original-language) title via an index site."""

from __future__ import annotations

import re
from dataclasses import dataclass

from rawsource.logging import get_logger
from rawsource.models.resolution import ResolvedTitle
from rawsource.tools.page_fetcher import PageFetcher
from rawsource.tools.page_parser import parse_associated_names
from rawsource.tools.web_search import SearchRotation
from rawsource.utils.text import contains_cjk, looks_english

logger = get_logger(__name__)

INDEX_DOMAIN = "novelupdates.com"
SERIES_URL_RE = re.compile(r"^https?://www\.novelupdates\.com/series/", re.IGNORECASE)


def build_index_query(title: str) -> str:
    return f'site:{INDEX_DOMAIN}/series "{title}"'


def pick_likely_raw_title(names: list[str]) -> str | None:
    """Prefer the first name written in a CJK/Hangul script, else the first name."""

    if not names:
        return None
    for n in names:
        if contains_cjk(n):
            return n
    return names[0]


@dataclass
class TitleResolver:
    """Find the raw title of a work from its index-site series page.

    Steps are strictly sequential: script check, series-page discovery through search,
    best-effort page fetch, then name extraction and selection.
    """

    search: SearchRotation
    fetcher: PageFetcher
    window_chars: int = 8000
    max_names: int = 30

    @staticmethod
    def needs_resolution(title: str) -> bool:
        return looks_english(title)

    async def resolve(self, title: str, *, debug: bool = False) -> ResolvedTitle:
        """Resolve `title`.

        Titles that are not predominantly ASCII are assumed to already be raw titles and are
        returned unresolved without any network call.
        """

        if not self.needs_resolution(title):
            return ResolvedTitle.unresolved()

        outcome = await self.search.search(build_index_query(title), debug=debug)
        dbg = {"search": [d.model_dump(mode="json") for d in outcome.diagnostics]} if debug else None

        series_url = next((u for u in outcome.result_urls if SERIES_URL_RE.match(u)), None)
        if series_url is None:
            logger.info("No index series page found", extra={"title_len": len(title)})
            return ResolvedTitle.unresolved(debug=dbg)

        page = await self.fetcher.fetch_text(series_url)
        names = parse_associated_names(page, window_chars=self.window_chars, max_names=self.max_names)
        raw_title = pick_likely_raw_title(names)

        logger.info(
            "Index page parsed",
            extra={"series_url": series_url, "names": len(names), "resolved": raw_title is not None},
        )
        return ResolvedTitle(
            series_url=series_url,
            resolved=raw_title is not None,
            raw_title=raw_title,
            associated_names=names,
            debug=dbg,
        )
