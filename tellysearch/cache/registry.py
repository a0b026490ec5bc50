"""Construction of the per-kind detail caches used by the application."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..common.keys import DetailKind, parse_key
from ..common.types import MovieDetail, PersonDetail, SeasonDetail, ShowDetail
from .disk import DiskTier, DiskUnavailable
from .facade import DetailCache
from .memory import DEFAULT_COUNT_LIMIT, DEFAULT_TTL_SECONDS, Clock, MemoryTier

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailCaches:
    """One :class:`DetailCache` per detail kind, created once at start-up."""

    show: DetailCache[ShowDetail]
    season: DetailCache[SeasonDetail]
    movie: DetailCache[MovieDetail]
    person: DetailCache[PersonDetail]

    def for_kind(self, kind: DetailKind) -> DetailCache:
        return getattr(self, kind.value)

    def for_key(self, key: str) -> DetailCache:
        return self.for_kind(parse_key(key).kind)

    def __iter__(self) -> Iterator[DetailCache]:
        return iter((self.show, self.season, self.movie, self.person))

    def clear(self) -> int:
        return sum(cache.clear() for cache in self)

    def purge_expired(self) -> int:
        return sum(cache.purge_expired() for cache in self)


def _build_cache(
    kind: DetailKind,
    cache_dir: Path | None,
    *,
    ttl: float,
    count_limit: int,
    clock: Clock,
) -> DetailCache:
    memory: MemoryTier = MemoryTier(count_limit, ttl, clock=clock, name=kind.namespace)
    disk: DiskTier | None = None
    if cache_dir is not None:
        opened = DiskTier.open(cache_dir, kind.namespace, ttl, clock=clock)
        if isinstance(opened, DiskUnavailable):
            LOGGER.warning(
                "Falling back to memory-only caching for %s: %s",
                kind.namespace,
                opened.reason,
            )
        else:
            disk = opened
    return DetailCache(kind, memory=memory, disk=disk)


def build_detail_caches(
    cache_dir: Path | None,
    *,
    ttl: float = DEFAULT_TTL_SECONDS,
    count_limit: int = DEFAULT_COUNT_LIMIT,
    clock: Clock = time.time,
) -> DetailCaches:
    """Create the show, season, movie and person caches.

    ``cache_dir=None`` disables the disk tier for every kind. A namespace
    whose directory cannot be created falls back to memory-only caching.
    """

    caches = {
        kind.value: _build_cache(
            kind, cache_dir, ttl=ttl, count_limit=count_limit, clock=clock
        )
        for kind in DetailKind
    }
    LOGGER.debug(
        "Built detail caches (dir=%s, ttl=%ss, count_limit=%d)",
        cache_dir,
        ttl,
        count_limit,
    )
    return DetailCaches(**caches)


__all__ = ["DetailCaches", "build_detail_caches"]
