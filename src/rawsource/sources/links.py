"""Manual search-engine links for looking a title up on known sources."""

from __future__ import annotations

from typing import Literal
from urllib.parse import quote_plus

from rawsource.sources.registry import SourceDefinition, list_sources

Engine = Literal["google", "bing", "duckduckgo", "baidu"]

ENGINE_URLS: dict[str, str] = {
    "google": "https://www.google.com/search?q={query}",
    "bing": "https://www.bing.com/search?q={query}",
    "duckduckgo": "https://duckduckgo.com/?q={query}",
    "baidu": "https://www.baidu.com/s?wd={query}",
}


def build_engine_url(engine: Engine, title: str, domain: str | None = None) -> str:
    """Build a search URL for `title`, optionally restricted to `domain`."""

    try:
        template = ENGINE_URLS[engine]
    except KeyError:
        raise ValueError(f"Unknown search engine: {engine}") from None
    query = f'"{title.strip()}"'
    if domain:
        query += f" site:{domain}"
    return template.format(query=quote_plus(query))


def build_source_links(
    title: str,
    engine: Engine = "google",
    sources: tuple[SourceDefinition, ...] | None = None,
) -> list[tuple[str, str]]:
    """Return `(source_id, url)` pairs, one site-restricted query per source."""

    links: list[tuple[str, str]] = []
    for s in sources if sources is not None else list_sources():
        if not s.domain:
            continue
        links.append((s.source_id, build_engine_url(engine, title, s.domain)))
    return links
