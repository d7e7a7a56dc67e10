"""Known publishing sources."""

from __future__ import annotations

from rawsource.sources.links import build_engine_url, build_source_links
from rawsource.sources.registry import (
    SOURCES,
    SourceDefinition,
    detect_source,
    domain_of,
    get_source,
    list_sources,
)

__all__ = [
    "SOURCES",
    "SourceDefinition",
    "build_engine_url",
    "build_source_links",
    "detect_source",
    "domain_of",
    "get_source",
    "list_sources",
]
