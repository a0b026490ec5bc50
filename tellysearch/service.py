"""Inbound detail service used by the presentation layer."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from .cache.coordinator import Fetch, FetchCoordinator
from .cache.registry import DetailCaches
from .common.keys import (
    DetailKind,
    movie_key,
    parse_key,
    person_key,
    season_key,
    show_key,
)
from .common.types import MovieDetail, PersonDetail, SeasonDetail, ShowDetail
from .tmdb import TMDbClient

LOGGER = logging.getLogger(__name__)


class DetailService:
    """Resolve detail records by key through the per-kind caches.

    One :class:`FetchCoordinator` is kept per kind so concurrent requests
    for the same key share a single network fetch.
    """

    def __init__(self, caches: DetailCaches, client: TMDbClient | None = None) -> None:
        self.caches = caches
        self._client = client
        self._coordinators: dict[DetailKind, FetchCoordinator] = {
            kind: FetchCoordinator(caches.for_kind(kind)) for kind in DetailKind
        }

    def coordinator(self, kind: DetailKind) -> FetchCoordinator:
        return self._coordinators[kind]

    async def resolve(self, key: str, fetch: Fetch | None = None) -> BaseModel:
        """Return the detail for *key*, fetching from TMDb when *fetch* is omitted."""

        parsed = parse_key(key)
        if fetch is None:
            if self._client is None:
                raise RuntimeError("No fetch function given and no TMDb client configured")
            fetch = self._client.fetcher_for(key)
        return await self._coordinators[parsed.kind].resolve(key, fetch)

    async def invalidate(self, key: str) -> None:
        parsed = parse_key(key)
        await self._coordinators[parsed.kind].invalidate(key)
        LOGGER.info("Invalidated %s", key)

    async def show_detail(self, show_id: int) -> ShowDetail:
        return await self.resolve(show_key(show_id))  # type: ignore[return-value]

    async def season_detail(self, tv_id: int, season_number: int) -> SeasonDetail:
        return await self.resolve(season_key(tv_id, season_number))  # type: ignore[return-value]

    async def movie_detail(self, movie_id: int) -> MovieDetail:
        return await self.resolve(movie_key(movie_id))  # type: ignore[return-value]

    async def person_detail(self, person_id: int) -> PersonDetail:
        return await self.resolve(person_key(person_id))  # type: ignore[return-value]


__all__ = ["DetailService"]
