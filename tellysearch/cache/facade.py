"""Read-through/write-through facade over the memory and disk tiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from threading import Lock
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ..common.keys import DetailKind, parse_key
from ..errors import DecodeError, DiskIOError, InvalidKeyError
from .disk import DiskTier
from .memory import MemoryTier
from .serialization import DetailSerializer

ModelT = TypeVar("ModelT", bound=BaseModel)

LOGGER = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Lookup counters for a single detail cache."""

    memory_hits: int = 0
    disk_hits: int = 0
    misses: int = 0
    decode_failures: int = 0
    disk_write_failures: int = 0

    @property
    def hits(self) -> int:
        return self.memory_hits + self.disk_hits

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups answered by either tier."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        data["hit_rate"] = f"{self.hit_rate:.2f}%"
        return data


class DetailCache(Generic[ModelT]):
    """Two-tier cache for one detail kind.

    ``lookup`` consults memory first and falls back to disk, promoting disk
    hits into memory. ``store`` writes memory first and then disk; a disk
    failure is logged and does not fail the store.
    """

    def __init__(
        self,
        kind: DetailKind,
        *,
        memory: MemoryTier[ModelT],
        disk: DiskTier | None = None,
        serializer: DetailSerializer[ModelT] | None = None,
    ) -> None:
        self.kind = kind
        self.memory = memory
        self.disk = disk
        self.serializer: DetailSerializer[ModelT] = serializer or DetailSerializer(
            kind.record_type  # type: ignore[arg-type]
        )
        self.stats = CacheStats()
        self._stats_lock = Lock()

    @property
    def disk_available(self) -> bool:
        return self.disk is not None

    def validate_key(self, key: str) -> str:
        """Return *key* if it is a well-formed key of this cache's kind."""

        parsed = parse_key(key)
        if parsed.kind is not self.kind:
            raise InvalidKeyError(key, f"expected a {self.kind.value} key")
        return key

    def peek(self, key: str) -> ModelT | None:
        """Return the memory-resident value for *key* without touching disk."""

        self.validate_key(key)
        value = self.memory.get(key)
        if value is not None:
            self._count("memory_hits")
        return value

    def lookup(self, key: str) -> ModelT | None:
        """Return the cached value for *key* from the fastest tier holding it."""

        self.validate_key(key)
        value = self.memory.get(key)
        if value is not None:
            self._count("memory_hits")
            LOGGER.debug("Memory hit for %s", key)
            return value
        return self._lookup_disk(key)

    def lookup_disk(self, key: str) -> ModelT | None:
        """Consult only the disk tier, promoting a hit into memory."""

        self.validate_key(key)
        return self._lookup_disk(key)

    def _lookup_disk(self, key: str) -> ModelT | None:
        if self.disk is None:
            self._count("misses")
            return None
        data = self.disk.get(key)
        if data is None:
            self._count("misses")
            LOGGER.debug("Cache miss for %s", key)
            return None
        try:
            value = self.serializer.decode(data)
        except DecodeError as exc:
            self._count("decode_failures")
            self._count("misses")
            LOGGER.warning("Discarding undecodable disk entry for %s: %s", key, exc)
            self._remove_from_disk(key)
            return None
        self.memory.put(key, value)
        self._count("disk_hits")
        LOGGER.debug("Disk hit for %s; promoted to memory", key)
        return value

    def store(self, key: str, value: ModelT) -> None:
        """Write *value* through both tiers."""

        self.validate_key(key)
        data = self.serializer.encode(value)
        self.memory.put(key, value)
        if self.disk is None:
            return
        try:
            self.disk.put(key, data)
        except DiskIOError as exc:
            self._count("disk_write_failures")
            LOGGER.warning(
                "Disk write failed for %s; keeping memory copy only: %s", key, exc
            )

    get = lookup
    put = store

    def invalidate(self, key: str) -> None:
        """Remove *key* from both tiers."""

        self.validate_key(key)
        self.memory.remove(key)
        self._remove_from_disk(key)
        LOGGER.debug("Invalidated %s", key)

    def clear(self) -> int:
        """Drop every entry from both tiers.

        Returns the number of disk records removed, or the number of memory
        entries when running without a disk tier.
        """

        removed = self.memory.clear()
        if self.disk is not None:
            removed = self.disk.clear()
        LOGGER.info("Cleared %d %s cache entries", removed, self.kind.value)
        return removed

    def purge_expired(self) -> int:
        if self.disk is None:
            return 0
        return self.disk.purge_expired()

    def _remove_from_disk(self, key: str) -> None:
        if self.disk is None:
            return
        try:
            self.disk.remove(key)
        except DiskIOError as exc:
            LOGGER.warning("Failed to remove disk entry for %s: %s", key, exc)

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self.stats, name, getattr(self.stats, name) + 1)

    def __repr__(self) -> str:
        return (
            f"DetailCache(kind={self.kind.value!r}, memory={len(self.memory)}, "
            f"disk={self.disk!r})"
        )


__all__ = ["CacheStats", "DetailCache"]
