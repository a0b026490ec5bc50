"""Multi-tier detail cache: memory and disk tiers behind a read-through facade."""

from __future__ import annotations

from .coordinator import Fetch, FetchCoordinator
from .disk import DiskTier, DiskUnavailable
from .facade import CacheStats, DetailCache
from .memory import DEFAULT_COUNT_LIMIT, DEFAULT_TTL_SECONDS, MemoryTier
from .registry import DetailCaches, build_detail_caches
from .serialization import DetailSerializer

__all__ = [
    "CacheStats",
    "DEFAULT_COUNT_LIMIT",
    "DEFAULT_TTL_SECONDS",
    "DetailCache",
    "DetailCaches",
    "DetailSerializer",
    "DiskTier",
    "DiskUnavailable",
    "Fetch",
    "FetchCoordinator",
    "MemoryTier",
    "build_detail_caches",
]
