"""Match models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Match(BaseModel):
    """A confirmed correspondence between a title and a known source."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source_id: str = Field(alias="source")
    item_id: str = Field(alias="serieId")
    found_url: str = Field(alias="foundUrl")
    canonical_url: str = Field(alias="canonicalUrl")
