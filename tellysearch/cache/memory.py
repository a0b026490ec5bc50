"""Bounded, expiring in-process LRU tier for decoded detail records."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Generic, Iterator, TypeVar

from ..common.validation import require_positive, require_positive_number

DEFAULT_COUNT_LIMIT = 50
DEFAULT_TTL_SECONDS = 3 * 60 * 60

Clock = Callable[[], float]
ValueT = TypeVar("ValueT")

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class _MemoryEntry(Generic[ValueT]):
    value: ValueT
    expires_at: float


class MemoryTier(Generic[ValueT]):
    """LRU cache with a count limit and a fixed time-to-live.

    Entries are kept in an ``OrderedDict`` ordered from least to most
    recently used; reads and writes move the key to the end.
    """

    def __init__(
        self,
        count_limit: int = DEFAULT_COUNT_LIMIT,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Clock = time.time,
        name: str = "memory",
    ) -> None:
        self.count_limit = require_positive(count_limit, name="count_limit")
        self.ttl = require_positive_number(ttl, name="ttl")
        self.name = name
        self._clock = clock
        self._entries: OrderedDict[str, _MemoryEntry[ValueT]] = OrderedDict()
        self._lock = RLock()

    def get(self, key: str) -> ValueT | None:
        """Return the value for *key* unless it is missing or expired.

        Expired entries are removed as a side effect.
        """

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                LOGGER.debug("Expired %s from %s tier", key, self.name)
                return None
            self._entries.move_to_end(key)
            return entry.value

    def put(self, key: str, value: ValueT) -> None:
        """Insert *value*, evicting least recently used entries over the limit."""

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = _MemoryEntry(value, self._clock() + self.ttl)
            while len(self._entries) > self.count_limit:
                evicted, _ = self._entries.popitem(last=False)
                LOGGER.debug(
                    "Evicted %s from %s tier (limit=%d)",
                    evicted,
                    self.name,
                    self.count_limit,
                )

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> int:
        """Remove all entries and return how many were resident."""

        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def keys(self) -> list[str]:
        """Resident keys ordered from least to most recently used."""

        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


__all__ = ["MemoryTier", "DEFAULT_COUNT_LIMIT", "DEFAULT_TTL_SECONDS", "Clock"]
