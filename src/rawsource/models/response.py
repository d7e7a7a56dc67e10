"""Pipeline response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rawsource.models.match import Match
from rawsource.models.resolution import ResolvedTitle
from rawsource.models.search import AttemptDiagnostic


class SourceDiagnostic(BaseModel):
    """Debug record for one per-source lookup."""

    source: str
    domain: str
    query: str
    status: str
    attempts: list[AttemptDiagnostic] = Field(default_factory=list)
    error: str | None = None


class PipelineResponse(BaseModel):
    """Top-level output of one pipeline invocation."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    raw_title: str | None = Field(default=None, alias="rawTitle")
    nu: ResolvedTitle = Field(default_factory=ResolvedTitle)
    matches: list[Match] = Field(default_factory=list)
    debug: list[SourceDiagnostic] | None = None

    @property
    def not_found(self) -> bool:
        return not self.matches

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON shape consumed by the front-end."""

        payload: dict[str, Any] = {
            "query": self.query,
            "rawTitle": self.raw_title,
            "nu": self.nu.model_dump(mode="json", by_alias=True, exclude_none=False),
            "matches": [m.model_dump(mode="json", by_alias=True) for m in self.matches],
            "notFound": self.not_found,
        }
        if payload["nu"].get("debug") is None:
            payload["nu"].pop("debug", None)
        if self.debug is not None:
            payload["debug"] = [d.model_dump(mode="json") for d in self.debug]
        return payload
