"""Tests for logging setup and request context."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from rawsource.logging import _ContextFilter, configure_logging, log_exception, request_context, set_source


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_configure_logging_replaces_its_own_handler(restore_root_logger) -> None:
    configure_logging("DEBUG")
    configure_logging("INFO")

    ours = [h for h in restore_root_logger.handlers if isinstance(h, RichHandler)]
    assert len(ours) == 1
    assert restore_root_logger.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_context_filter_reads_request_and_source() -> None:
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "m", None, None)
    with request_context(request_id="abc123"):
        set_source("69shuba")
        _ContextFilter().filter(record)
    assert record.request_id == "abc123"
    assert record.source_id == "69shuba"

    outside = logging.LogRecord("t", logging.INFO, __file__, 1, "m", None, None)
    _ContextFilter().filter(outside)
    assert outside.request_id == "-" and outside.source_id == "-"


def test_log_exception_appends_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("rawsource.test")
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        with caplog.at_level(logging.ERROR, logger="rawsource.test"):
            log_exception(logger, "Lookup failed", source="twkan", query='"书" site:twkan.com')

    (record,) = caplog.records
    assert record.getMessage() == "Lookup failed (query='\"书\" site:twkan.com' source='twkan')"
    assert record.exc_info is not None
