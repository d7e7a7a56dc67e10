"""Registry of known publishing sources.

Each source recognises its per-title page by a URL pattern with exactly one capture group
(the site's item id) and can rebuild a canonical page URL from that id.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from rawsource.logging import get_logger
from rawsource.models.match import Match

logger = get_logger(__name__)

_HOSTNAME_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)+$", re.I)
_SCHEME_PREFIX_RE = re.compile(r"^\^?https\??:(?:\\?/){2}")


def domain_from_pattern(pattern: str) -> str:
    """Extract the literal hostname a URL pattern is anchored to.

    A leading `www.` is dropped so `site:` queries also cover the bare and mobile hosts.
    Returns an empty string when the pattern does not start with a literal host.
    """

    m = _SCHEME_PREFIX_RE.match(pattern)
    if not m:
        return ""
    rest = pattern[m.end():]
    host_chars: list[str] = []
    i = 0
    while i < len(rest):
        ch = rest[i]
        if ch == "\\" and i + 1 < len(rest):
            nxt = rest[i + 1]
            if nxt == "/":
                break
            if nxt in ".-":
                host_chars.append(nxt)
                i += 2
                continue
            return ""
        if ch in "/?#(":
            break
        if ch in "[]{}*+|$^":
            return ""
        host_chars.append(ch)
        i += 1

    host = "".join(host_chars).lower()
    if not _HOSTNAME_RE.match(host):
        return ""
    return host.removeprefix("www.")


@dataclass(frozen=True)
class SourceDefinition:
    """One known publishing site."""

    source_id: str
    url_pattern: str
    canonical_template: str
    domain: str = field(init=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_regex", re.compile(self.url_pattern, re.IGNORECASE))
        object.__setattr__(self, "domain", domain_from_pattern(self.url_pattern))
        if not self.domain:
            logger.warning("No hostname derivable for source=%s", self.source_id)

    def extract_item_id(self, url: str) -> str | None:
        """Return the item id when `url` is this source's per-title page."""

        m = self._regex.search(url)
        if not m:
            return None
        return m.group(1)

    def canonicalize(self, item_id: str) -> str:
        return self.canonical_template.format(id=item_id)

    def match_url(self, url: str) -> Match | None:
        item_id = self.extract_item_id(url)
        if item_id is None:
            return None
        return Match(
            source_id=self.source_id,
            item_id=item_id,
            found_url=url,
            canonical_url=self.canonicalize(item_id),
        )


SOURCES: tuple[SourceDefinition, ...] = (
    SourceDefinition("fanqienovel", r"https?://fanqienovel\.com/page/(\d+)", "https://fanqienovel.com/page/{id}"),
    SourceDefinition("qimao", r"https?://www\.qimao\.com/shuku/(\d+)", "https://www.qimao.com/shuku/{id}"),
    SourceDefinition("novel543", r"https?://www\.novel543\.com/([^/?#]+)/?", "https://www.novel543.com/{id}/"),
    SourceDefinition("uuread", r"https?://www\.uuread\.tw/([^/?#]+)/?", "https://www.uuread.tw/{id}"),
    SourceDefinition("69shuba", r"https?://www\.69shuba\.com/book/(\d+)\.htm", "https://www.69shuba.com/book/{id}.htm"),
    SourceDefinition("twkan", r"https?://twkan\.com/book/(\d+)\.html", "https://twkan.com/book/{id}.html"),
    SourceDefinition("twbook", r"https?://www\.twbook\.cc/([^/?#]+)/?", "https://www.twbook.cc/{id}/"),
    SourceDefinition(
        "piaotia",
        r"https?://www\.piaotia\.com/bookinfo/(\d+)/\1\.html",
        "https://www.piaotia.com/bookinfo/{id}/{id}.html",
    ),
    SourceDefinition("trxs", r"https?://www\.trxs\.cc/tongren/(\d+)\.html", "https://www.trxs.cc/tongren/{id}.html"),
    SourceDefinition("tongrenshe", r"https?://tongrenshe\.cc/tongren/(\d+)\.html", "https://tongrenshe.cc/tongren/{id}.html"),
    SourceDefinition("uukanshu", r"https?://uukanshu\.cc/book/(\d+)/?", "https://uukanshu.cc/book/{id}/"),
    SourceDefinition("bixiange", r"https?://m\.bixiange\.me/book/(\d+)/?", "https://m.bixiange.me/book/{id}/"),
    SourceDefinition("ffxs8", r"https?://www\.ffxs8\.top/book/(\d+)/?", "https://www.ffxs8.top/book/{id}/"),
    SourceDefinition("biquge_tw", r"https?://www\.biquge\.tw/book/(\d+)\.html", "https://www.biquge.tw/book/{id}.html"),
    SourceDefinition("101kanshu", r"https?://101kanshu\.com/book/(\d+)\.html", "https://101kanshu.com/book/{id}.html"),
    SourceDefinition("drxsw", r"https?://www\.drxsw\.com/book/(\d+)/?", "https://www.drxsw.com/book/{id}/"),
)


def list_sources() -> tuple[SourceDefinition, ...]:
    """Return the registry in declaration order."""

    return SOURCES


def get_source(source_id: str) -> SourceDefinition | None:
    for s in SOURCES:
        if s.source_id == source_id:
            return s
    return None


def domain_of(source: SourceDefinition) -> str:
    return source.domain


def detect_source(url: str, sources: tuple[SourceDefinition, ...] | None = None) -> Match | None:
    """Detect which known source a pasted URL belongs to.

    Args:
        url: Any URL, typically copied from a browser.
        sources: Registry to test against (defaults to :data:`SOURCES`).

    Returns:
        The first matching source as a :class:`Match`, or None.
    """

    url = url.strip()
    if not url:
        return None
    for s in sources if sources is not None else SOURCES:
        m = s.match_url(url)
        if m is not None:
            return m
    return None
