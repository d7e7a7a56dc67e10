"""Title resolution models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResolvedTitle(BaseModel):
    """Outcome of resolving a possibly-English title to its raw title."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    series_url: str | None = None
    resolved: bool = False
    raw_title: str | None = None
    associated_names: list[str] = Field(default_factory=list)
    debug: dict[str, Any] | None = None

    @classmethod
    def unresolved(cls, *, debug: dict[str, Any] | None = None) -> ResolvedTitle:
        return cls(debug=debug)
