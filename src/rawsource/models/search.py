"""Search-related models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AttemptDiagnostic(BaseModel):
    """What happened when one backend endpoint was tried.

    Only collected in debug mode; never influences control flow.
    """

    backend: str
    ok: bool
    status: int | None = None
    url: str | None = None
    len: int = 0
    head: str = ""
    links: int = 0
    error: str | None = None


class SearchOutcome(BaseModel):
    """Result of one query across the rotation of backends."""

    ok: bool
    result_urls: list[str] = Field(default_factory=list)
    backend: str | None = None
    diagnostics: list[AttemptDiagnostic] = Field(default_factory=list)
