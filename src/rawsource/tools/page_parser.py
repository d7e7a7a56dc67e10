"""Index-page parsing: alternate ("associated") names of a work."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from rawsource.logging import get_logger
from rawsource.utils.text import collapse_whitespace, strip_tags

logger = get_logger(__name__)

ASSOCIATED_MARKER = "associated names"
_BR_RE = re.compile(r"<br[\s/]*>", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"</(?:div|section|table)\s*>", re.IGNORECASE)


def _list_item_names(window: str) -> list[str]:
    soup = BeautifulSoup(window, "lxml")
    names: list[str] = []
    for li in soup.find_all("li"):
        txt = collapse_whitespace(li.get_text(" "))
        if txt:
            names.append(txt)
    return names


def _line_break_names(window: str) -> list[str]:
    """Names separated by `<br>` in the block holding the first `<br>` after the marker.

    The block runs from the last closing `div`/`section`/`table` before that `<br>` to the
    first one after it.
    """

    br = _BR_RE.search(window)
    if br is None:
        return []
    start = 0
    for closing in _BLOCK_END_RE.finditer(window, 0, br.start()):
        start = closing.end()
    end = _BLOCK_END_RE.search(window, br.end())
    block = window[start : end.start() if end else len(window)]
    return [p for p in (strip_tags(part) for part in _BR_RE.split(block)) if p]


def parse_associated_names(html: str, *, window_chars: int = 8000, max_names: int = 30) -> list[str]:
    """Extract alternate names listed after an "Associated Names" heading.

    Only a bounded window of markup following the marker is inspected. Two strategies run
    over it (list items, then `<br>`-separated runs) and their results are merged in
    discovery order without duplicates.

    Args:
        html: Index page markup; may be empty.
        window_chars: Characters to inspect, counted from the start of the marker.
        max_names: Cap on the number of names returned.

    Returns:
        Names in discovery order, at most `max_names`.
    """

    if not html:
        return []
    idx = html.lower().find(ASSOCIATED_MARKER)
    if idx == -1:
        return []

    start = idx + len(ASSOCIATED_MARKER)
    window = html[start : idx + window_chars]

    names: dict[str, None] = {}
    for name in _list_item_names(window):
        names.setdefault(name, None)
    for name in _line_break_names(window):
        names.setdefault(name, None)

    found = list(names)[:max_names]
    logger.debug("Associated names parsed", extra={"count": len(found)})
    return found
