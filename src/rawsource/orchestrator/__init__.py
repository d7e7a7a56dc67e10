"""Resolution pipeline: title resolver, match aggregator and the runner tying them together."""

from __future__ import annotations

from rawsource.orchestrator.aggregator import LookupOutcome, MatchAggregator, dedupe_matches
from rawsource.orchestrator.resolver import TitleResolver, pick_likely_raw_title
from rawsource.orchestrator.runner import (
    EnglishInputRejectedError,
    InvalidQueryError,
    Pipeline,
    PipelineError,
)

__all__ = [
    "EnglishInputRejectedError",
    "InvalidQueryError",
    "LookupOutcome",
    "MatchAggregator",
    "Pipeline",
    "PipelineError",
    "TitleResolver",
    "dedupe_matches",
    "pick_likely_raw_title",
]
