"""TMDb network access returning raw detail response bodies."""

from __future__ import annotations

import functools
import logging

import httpx

from .cache.coordinator import Fetch
from .common.keys import DetailKind, parse_key
from .config import DEFAULT_TMDB_BASE_URL, Settings
from .errors import NetworkFetchError

LOGGER = logging.getLogger(__name__)

_APPENDS: dict[DetailKind, str] = {
    DetailKind.SHOW: "credits,recommendations",
    DetailKind.SEASON: "credits",
    DetailKind.MOVIE: "credits,recommendations",
    DetailKind.PERSON: "combined_credits",
}


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient`` configured from *settings*."""

    return httpx.AsyncClient(timeout=settings.tmdb_timeout)


class TMDbClient:
    """Fetch show, season, movie and person details from TMDb."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = DEFAULT_TMDB_BASE_URL,
        language: str | None = "en-US",
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be provided")
        self._client = http_client
        self._api_key = str(api_key)
        self._base_url = base_url.rstrip("/")
        self._language = language

    @classmethod
    def from_settings(
        cls, http_client: httpx.AsyncClient, settings: Settings
    ) -> "TMDbClient":
        if not settings.tmdb_api_key:
            raise RuntimeError("TMDB_API_KEY must be provided")
        return cls(
            http_client,
            settings.tmdb_api_key,
            base_url=settings.tmdb_base,
            language=settings.tmdb_language,
        )

    async def fetch_show(self, show_id: int) -> bytes:
        return await self._get(
            f"show:{show_id}:detail", f"/tv/{show_id}", _APPENDS[DetailKind.SHOW]
        )

    async def fetch_season(self, tv_id: int, season_number: int) -> bytes:
        return await self._get(
            f"season:{tv_id}:{season_number}:detail",
            f"/tv/{tv_id}/season/{season_number}",
            _APPENDS[DetailKind.SEASON],
        )

    async def fetch_movie(self, movie_id: int) -> bytes:
        return await self._get(
            f"movie:{movie_id}:detail", f"/movie/{movie_id}", _APPENDS[DetailKind.MOVIE]
        )

    async def fetch_person(self, person_id: int) -> bytes:
        return await self._get(
            f"person:{person_id}:detail",
            f"/person/{person_id}",
            _APPENDS[DetailKind.PERSON],
        )

    def fetcher_for(self, key: str) -> Fetch:
        """Return a zero-argument coroutine function fetching *key*."""

        parsed = parse_key(key)
        if parsed.kind is DetailKind.SHOW:
            return functools.partial(self.fetch_show, *parsed.ids)
        if parsed.kind is DetailKind.SEASON:
            return functools.partial(self.fetch_season, *parsed.ids)
        if parsed.kind is DetailKind.MOVIE:
            return functools.partial(self.fetch_movie, *parsed.ids)
        return functools.partial(self.fetch_person, *parsed.ids)

    async def _get(self, key: str, path: str, append: str) -> bytes:
        url = f"{self._base_url}{path}"
        params = {"append_to_response": append}
        if self._language:
            params["language"] = self._language
        LOGGER.debug("GET %s for %s", url, key)
        try:
            resp = await self._client.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            raise NetworkFetchError(key, str(exc) or type(exc).__name__) from exc
        if not resp.is_success:
            raise NetworkFetchError(
                key,
                f"TMDb responded with HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content


__all__ = ["TMDbClient", "create_http_client"]
