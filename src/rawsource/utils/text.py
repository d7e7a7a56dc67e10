"""Text classification and cleanup helpers."""

from __future__ import annotations

import html
import re

# Printable ASCII, space through tilde.
_PRINTABLE_ASCII_RE = re.compile(r"[\x20-\x7e]")
# Hiragana/Katakana, CJK ideographs (incl. extension A) and Hangul syllables.
_CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u9fff\uac00-\ud7af]")
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

ENGLISH_ASCII_RATIO = 0.85


def looks_english(text: str) -> bool:
    """Return True when more than 85% of the characters are printable ASCII."""

    ascii_count = len(_PRINTABLE_ASCII_RE.findall(text))
    return ascii_count / max(1, len(text)) > ENGLISH_ASCII_RATIO


def contains_cjk(text: str) -> bool:
    return bool(_CJK_RE.search(text))


def strip_tags(fragment: str) -> str:
    """Drop markup, decode entities and collapse whitespace."""

    text = _TAG_RE.sub(" ", fragment)
    return collapse_whitespace(html.unescape(text))


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()
