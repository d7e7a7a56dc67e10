"""Extract destination URLs from search-backend payloads.

HTML is scanned with a tolerant attribute pattern rather than a DOM parser: result pages are
not assumed to be well-formed, and only `href` values are needed.
"""

from __future__ import annotations

import html
import json
import re
from typing import Any, Iterable
from urllib.parse import parse_qs, urljoin, urlsplit

from rawsource.logging import get_logger

logger = get_logger(__name__)

_HREF_RE = re.compile(
    r"""\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'<>]+))""",
    re.IGNORECASE,
)
_BARE_URL_RE = re.compile(r"""https?://[^\s<>"'()\[\]]+""", re.IGNORECASE)
# Query parameters that carry the real destination behind a redirect/tracking wrapper.
REDIRECT_PARAMS: tuple[str, ...] = ("uddg", "u", "url", "target", "dest", "redirect")
_HTTP_SCHEMES = frozenset({"http", "https"})
_CONTROL_RE = re.compile(r"[\x00-\x20\x7f]")


def _is_http_url(url: str) -> bool:
    if _CONTROL_RE.search(url):
        return False
    try:
        parts = urlsplit(url)
        _ = parts.port  # raises on a malformed port
    except ValueError:
        return False
    return parts.scheme.lower() in _HTTP_SCHEMES and bool(parts.netloc)


def _root_domain(host: str) -> str:
    labels = [p for p in host.lower().split(".") if p]
    return ".".join(labels[-2:])


def is_engine_host(url: str, engine_origin: str) -> bool:
    """Return True when `url` points back at the search engine itself."""

    try:
        host = (urlsplit(url).hostname or "").lower()
        engine_host = (urlsplit(engine_origin).hostname or "").lower()
    except ValueError:
        return False
    if not host or not engine_host:
        return False
    root = _root_domain(engine_host)
    return host == engine_host or host == root or host.endswith("." + root)


def unwrap_redirect(url: str) -> str:
    """Return the destination embedded in a redirect wrapper, else `url` unchanged."""

    try:
        query = urlsplit(url).query
    except ValueError:
        return url
    if not query:
        return url
    params = parse_qs(query)
    for name in REDIRECT_PARAMS:
        for value in params.get(name, []):
            if _is_http_url(value):
                return value
    return url


def normalize_candidate(href: str, base_url: str) -> str | None:
    """Resolve one raw href into an absolute http(s) destination, or None."""

    href = html.unescape(href).strip()
    if not href or href.startswith("#"):
        return None
    try:
        absolute = urljoin(base_url, href)
    except ValueError:
        return None
    absolute = unwrap_redirect(absolute)
    if not _is_http_url(absolute):
        return None
    return absolute


def _dedupe(urls: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for u in urls:
        if u in seen:
            continue
        seen.add(u)
        out.append(u)
    return out


def iter_hrefs(markup: str) -> Iterable[str]:
    for m in _HREF_RE.finditer(markup):
        yield next(g for g in m.groups() if g is not None)


def extract_html_links(markup: str, base_url: str, *, external_only: bool = True) -> list[str]:
    """Extract absolute destination URLs from an HTML result page.

    Args:
        markup: Raw HTML (possibly malformed).
        base_url: Origin of the search engine, used to resolve relative links.
        external_only: Drop links that point back at the engine's own host.

    Returns:
        Unique URLs in first-seen order.
    """

    candidates: list[str] = []
    for href in iter_hrefs(markup or ""):
        url = normalize_candidate(href, base_url)
        if url is None:
            continue
        if external_only and is_engine_host(url, base_url):
            continue
        candidates.append(url)
    return _dedupe(candidates)


def extract_text_links(text: str, base_url: str, *, external_only: bool = True) -> list[str]:
    """Extract absolute URLs from plain text or markdown (text-proxy output)."""

    candidates: list[str] = []
    for m in _BARE_URL_RE.finditer(text or ""):
        url = normalize_candidate(m.group(0).rstrip(".,;:!"), base_url)
        if url is None:
            continue
        if external_only and is_engine_host(url, base_url):
            continue
        candidates.append(url)
    return _dedupe(candidates)


def extract_json_links(payload: str | dict[str, Any], *, url_field: str = "url") -> list[str]:
    """Extract result URLs from a structured search-API response.

    Expects an object with a `results` list of records; malformed payloads yield no links.
    """

    data: Any = payload
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except ValueError:
            logger.debug("Search payload is not JSON (len=%d)", len(payload))
            return []
    if not isinstance(data, dict):
        return []
    results = data.get("results")
    if not isinstance(results, list):
        return []

    urls: list[str] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        url = item.get(url_field)
        if isinstance(url, str) and _is_http_url(url.strip()):
            urls.append(url.strip())
    return _dedupe(urls)
