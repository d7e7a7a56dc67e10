"""Tests for search payload link extraction."""

from __future__ import annotations

import json

from rawsource.tools.link_extractor import (
    extract_html_links,
    extract_json_links,
    extract_text_links,
    unwrap_redirect,
)

DDG = "https://lite.duckduckgo.com/"

DDG_LITE_PAGE = """
<html><body>
<form action="/lite/" method="post"><a href="/lite/?q=next&amp;s=30">Next</a></form>
<table>
<tr><td><a rel="nofollow" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.69shuba.com%2Fbook%2F12345.htm&amp;rut=abc" class='result-link'>万相之王</a></td></tr>
<tr><td><a href='https://twkan.com/book/777.html'>twkan</a></td></tr>
<tr><td><a href=https://www.qimao.com/shuku/42/ class=result-link>qimao</a></td></tr>
<tr><td><a href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.69shuba.com%2Fbook%2F12345.htm&amp;rut=def">dup</a></td></tr>
<tr><td><a href="javascript:void(0)">js</a> <a href="mailto:a@b.c">mail</a> <a href="#top">top</a></td></tr>
<tr><td><a href="https://duckduckgo.com/settings">settings</a></td></tr>
</table>
</body></html>
"""


def test_html_extraction_unwraps_and_dedupes() -> None:
    """It should decode redirect wrappers, accept any quoting style and keep first-seen order."""

    assert extract_html_links(DDG_LITE_PAGE, DDG) == [
        "https://www.69shuba.com/book/12345.htm",
        "https://twkan.com/book/777.html",
        "https://www.qimao.com/shuku/42/",
    ]


def test_html_extraction_keeps_engine_links_when_not_external_only() -> None:
    links = extract_html_links(DDG_LITE_PAGE, DDG, external_only=False)
    assert "https://lite.duckduckgo.com/lite/?q=next&s=30" in links
    assert "https://duckduckgo.com/settings" in links


def test_html_extraction_only_http_and_unique() -> None:
    """Never a non-http(s) URL, never a duplicate."""

    noisy = (
        '<a href="ftp://x.test/a">f</a><a href="data:text/html,hi">d</a>'
        '<a href="https://a.test/1">1</a><a HREF = "https://a.test/1">again</a>'
        '<a href="/relative/path">rel</a>'
    )
    links = extract_html_links(noisy, "https://engine.test/", external_only=False)
    assert links == ["https://a.test/1", "https://engine.test/relative/path"]
    assert all(u.startswith(("http://", "https://")) for u in links)
    assert len(links) == len(set(links))


def test_html_extraction_skips_malformed_redirect_target() -> None:
    """One unparsable candidate is dropped; the rest of the page still yields links."""

    markup = (
        '<a href="https://duckduckgo.com/l/?uddg=http%3A%2F%2F%5Bbad">broken</a>'
        '<a href="https://duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.69shuba.com%2Fbook%2F12345.htm">ok</a>'
        '<a href="http://[::1">raw</a>'
    )
    assert extract_html_links(markup, DDG) == ["https://www.69shuba.com/book/12345.htm"]


def test_control_characters_reject_candidate() -> None:
    wrapped = "https://duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.novelupdates.com%2Fseries%2Fabc%0Adef%2F"
    assert unwrap_redirect(wrapped) == wrapped
    assert extract_html_links(f'<a href="{wrapped}">x</a>', DDG) == []
    assert extract_text_links("see http://x.test:notaport/a", DDG) == []


def test_html_extraction_handles_empty_payload() -> None:
    assert extract_html_links("", DDG) == []


def test_unwrap_redirect_ignores_non_url_params() -> None:
    assert unwrap_redirect("https://e.test/l/?u=notaurl") == "https://e.test/l/?u=notaurl"
    assert unwrap_redirect("https://e.test/l/?url=https%3A%2F%2Fx.test%2F") == "https://x.test/"


def test_json_extraction_reads_results_array() -> None:
    payload = json.dumps(
        {
            "query": "x",
            "results": [
                {"url": "https://fanqienovel.com/page/1", "title": "a"},
                {"title": "no url"},
                "garbage",
                {"url": "ftp://nope.test/"},
                {"url": "https://fanqienovel.com/page/1"},
                {"url": "https://www.qimao.com/shuku/2"},
            ],
        }
    )
    assert extract_json_links(payload) == [
        "https://fanqienovel.com/page/1",
        "https://www.qimao.com/shuku/2",
    ]


def test_json_extraction_tolerates_malformed_payload() -> None:
    assert extract_json_links("<html>blocked</html>") == []
    assert extract_json_links('{"results": "nope"}') == []
    assert extract_json_links("[1, 2]") == []


def test_text_extraction_from_proxy_markdown() -> None:
    markdown = (
        "Title: DuckDuckGo\n\n"
        "1. [万相之王](https://duckduckgo.com/l/?uddg=https%3A%2F%2Ftwkan.com%2Fbook%2F9.html&rut=1)\n"
        "   https://twkan.com/book/9.html.\n"
        "2. [Settings](https://duckduckgo.com/settings)\n"
    )
    assert extract_text_links(markdown, DDG) == ["https://twkan.com/book/9.html"]
