"""Network-facing tools: search backends, page fetching and parsing."""

from __future__ import annotations

from rawsource.tools.link_extractor import extract_html_links, extract_json_links, extract_text_links
from rawsource.tools.page_fetcher import PageFetcher, build_http_client
from rawsource.tools.page_parser import parse_associated_names
from rawsource.tools.web_search import (
    BackendResponse,
    SearchBackend,
    SearchBackendError,
    SearchRotation,
    get_search_rotation,
)

__all__ = [
    "BackendResponse",
    "PageFetcher",
    "SearchBackend",
    "SearchBackendError",
    "SearchRotation",
    "build_http_client",
    "extract_html_links",
    "extract_json_links",
    "extract_text_links",
    "get_search_rotation",
    "parse_associated_names",
]
