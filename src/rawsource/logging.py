"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.logging import RichHandler


_request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "rawsource_request_id", default="-"
)
_source_var: contextvars.ContextVar[str] = contextvars.ContextVar("rawsource_source", default="-")

_FORMAT = "%(asctime)s %(levelname)s req=%(request_id)s src=%(source_id)s %(name)s: %(message)s"
_HANDLER_TAG = "_rawsource_handler"
_NOISY_LOGGERS = ("httpx", "httpcore", "primp")


class _ContextFilter(logging.Filter):
    """Inject request context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = _request_id_var.get()  # type: ignore[attr-defined]
        record.source_id = _source_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def request_context(*, request_id: str, source: str | None = None) -> Any:
    """Temporarily bind request context for structured logging.

    The context is copied into tasks created inside the block, so the per-source
    lookups of one request share its id.

    Args:
        request_id: Request identifier.
        source: Optional source identifier.
    """

    token_request = _request_id_var.set(request_id)
    token_source = _source_var.set(source or _source_var.get())
    try:
        yield
    finally:
        _request_id_var.reset(token_request)
        _source_var.reset(token_source)


def set_source(source: str) -> None:
    """Update current source in context."""

    _source_var.set(source)


def configure_logging(level: str = "INFO") -> None:
    """Install the rich console handler on the root logger.

    Safe to call more than once (app factory and CLI both call it): the handler installed by a
    previous call is replaced rather than stacked.

    Args:
        level: Root logging level name.
    """

    handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True)
    handler.addFilter(_ContextFilter())
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    setattr(handler, _HANDLER_TAG, True)

    root = logging.getLogger()
    for old in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception, appending `key=value` context to the message."""

    if not context:
        logger.exception("%s", msg)
        return
    details = " ".join(f"{k}={v!r}" for k, v in sorted(context.items()))
    logger.exception("%s (%s)", msg, details)
