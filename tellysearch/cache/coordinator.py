"""Cache-first network fetching with single-flight de-duplication."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from pydantic import BaseModel

from ..errors import DecodeError, NetworkFetchError
from .facade import DetailCache
from .serialization import DetailSerializer

ModelT = TypeVar("ModelT", bound=BaseModel)

Fetch = Callable[[], Awaitable[bytes]]

LOGGER = logging.getLogger(__name__)


class FetchCoordinator(Generic[ModelT]):
    """Resolve detail records through a :class:`DetailCache`.

    At most one load runs per key. Callers arriving while a load is
    outstanding await the same task and receive its result or error.
    Waiters are shielded so a cancelled caller leaves the load running for
    the others.
    """

    def __init__(
        self,
        cache: DetailCache[ModelT],
        *,
        serializer: DetailSerializer[ModelT] | None = None,
    ) -> None:
        self._cache = cache
        self._serializer = serializer or cache.serializer
        self._in_flight: dict[str, asyncio.Task[ModelT]] = {}
        self._generations: dict[str, int] = {}
        self._write_lock = asyncio.Lock()

    @property
    def cache(self) -> DetailCache[ModelT]:
        return self._cache

    @property
    def in_flight(self) -> int:
        """Number of keys with an outstanding load."""

        return len(self._in_flight)

    async def resolve(self, key: str, fetch: Fetch) -> ModelT:
        """Return the record for *key*, fetching it with *fetch* on a miss.

        Raises:
            InvalidKeyError: if *key* is malformed or of another kind.
            NetworkFetchError: if the fetch fails or returns undecodable bytes.
        """

        cached = self._cache.peek(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            generation = self._generations.get(key, 0)
            task = asyncio.get_running_loop().create_task(
                self._load(key, fetch, generation)
            )
            self._in_flight[key] = task
            task.add_done_callback(functools.partial(self._finish, key))
        else:
            LOGGER.debug("Joining in-flight load for %s", key)
        return await asyncio.shield(task)

    async def invalidate(self, key: str) -> None:
        """Drop *key* from the cache and detach any load already in flight.

        A detached load still answers its existing waiters but its result is
        not stored, so the next :meth:`resolve` fetches again.
        """

        self._cache.validate_key(key)
        self._generations[key] = self._generations.get(key, 0) + 1
        self._in_flight.pop(key, None)
        async with self._write_lock:
            await asyncio.to_thread(self._cache.invalidate, key)

    def _finish(self, key: str, task: asyncio.Task[ModelT]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            LOGGER.debug("Load for %s was cancelled", key)
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.debug("Load for %s failed: %s", key, exc)

    def _is_current(self, key: str, generation: int) -> bool:
        return self._generations.get(key, 0) == generation

    async def _load(self, key: str, fetch: Fetch, generation: int) -> ModelT:
        cached = None
        async with self._write_lock:
            if self._is_current(key, generation):
                cached = await asyncio.to_thread(self._cache.lookup_disk, key)
        if cached is not None:
            return cached

        LOGGER.info("Fetching %s from the network", key)
        try:
            data = await fetch()
        except NetworkFetchError:
            LOGGER.warning("Network fetch failed for %s", key, exc_info=True)
            raise
        except Exception as exc:
            LOGGER.warning("Network fetch failed for %s", key, exc_info=True)
            raise NetworkFetchError(key, str(exc) or type(exc).__name__) from exc

        try:
            value = self._serializer.decode(data)
        except DecodeError as exc:
            LOGGER.warning("Discarding malformed response for %s: %s", key, exc)
            raise NetworkFetchError(key, f"malformed response: {exc}") from exc

        async with self._write_lock:
            if self._is_current(key, generation):
                await asyncio.to_thread(self._cache.store, key, value)
            else:
                LOGGER.debug("Not caching %s; it was invalidated during the load", key)
        return value


__all__ = ["Fetch", "FetchCoordinator"]
