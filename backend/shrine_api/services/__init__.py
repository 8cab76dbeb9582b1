"""Shrine pipeline services."""

from .cache import ShrineCache, ShrineRead, ShrineRefresher, fallback_payload
from .pipeline import ShrinePipeline, ShrineSnapshot, build_pipeline, write_snapshot
from .sources import (
    FetchResult,
    ShrineServiceError,
    SourceFailure,
    SourceFetchError,
    SourceFetcher,
)

__all__ = [
    "FetchResult",
    "ShrineCache",
    "ShrinePipeline",
    "ShrineRead",
    "ShrineRefresher",
    "ShrineServiceError",
    "ShrineSnapshot",
    "SourceFailure",
    "SourceFetchError",
    "SourceFetcher",
    "build_pipeline",
    "fallback_payload",
    "write_snapshot",
]
