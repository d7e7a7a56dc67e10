"""Pydantic models used across the project."""

from __future__ import annotations

from rawsource.models.match import Match
from rawsource.models.resolution import ResolvedTitle
from rawsource.models.response import PipelineResponse, SourceDiagnostic
from rawsource.models.search import AttemptDiagnostic, SearchOutcome

__all__ = [
    "AttemptDiagnostic",
    "Match",
    "PipelineResponse",
    "ResolvedTitle",
    "SearchOutcome",
    "SourceDiagnostic",
]
