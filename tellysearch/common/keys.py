"""Cache key construction and validation for detail records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidKeyError
from .types import DetailRecord, MovieDetail, PersonDetail, SeasonDetail, ShowDetail

KEY_SUFFIX = "detail"


class DetailKind(str, Enum):
    """Entity kinds that own a dedicated detail cache."""

    SHOW = "show"
    SEASON = "season"
    MOVIE = "movie"
    PERSON = "person"

    @property
    def namespace(self) -> str:
        """Disk namespace holding records of this kind."""

        return _NAMESPACES[self]

    @property
    def record_type(self) -> type[DetailRecord]:
        return _RECORD_TYPES[self]

    @property
    def id_count(self) -> int:
        return 2 if self is DetailKind.SEASON else 1


_NAMESPACES: dict[DetailKind, str] = {
    DetailKind.SHOW: "ShowDetail",
    DetailKind.SEASON: "SeasonDetail",
    DetailKind.MOVIE: "MovieDetail",
    DetailKind.PERSON: "PersonDetail",
}

_RECORD_TYPES: dict[DetailKind, type[DetailRecord]] = {
    DetailKind.SHOW: ShowDetail,
    DetailKind.SEASON: SeasonDetail,
    DetailKind.MOVIE: MovieDetail,
    DetailKind.PERSON: PersonDetail,
}


@dataclass(frozen=True, slots=True)
class DetailKey:
    """Parsed cache key such as ``season:1399:2:detail``."""

    kind: DetailKind
    ids: tuple[int, ...]

    def __str__(self) -> str:
        parts = [self.kind.value, *(str(i) for i in self.ids), KEY_SUFFIX]
        return ":".join(parts)


def _parse_number(key: object, segment: str, *, name: str, allow_zero: bool) -> int:
    if not segment.isascii() or not segment.isdigit():
        raise InvalidKeyError(key, f"{name} must be a non-negative integer")
    value = int(segment)
    if str(value) != segment:
        raise InvalidKeyError(key, f"{name} must not have leading zeros")
    if value == 0 and not allow_zero:
        raise InvalidKeyError(key, f"{name} must be positive")
    return value


def parse_key(key: object) -> DetailKey:
    """Parse *key* into a :class:`DetailKey` or raise :class:`InvalidKeyError`."""

    if not isinstance(key, str):
        raise InvalidKeyError(key, "key must be a string")
    if not key or key != key.strip():
        raise InvalidKeyError(key, "key must be non-empty without surrounding whitespace")

    segments = key.split(":")
    try:
        kind = DetailKind(segments[0])
    except ValueError:
        raise InvalidKeyError(key, f"unknown detail kind {segments[0]!r}") from None

    if len(segments) != kind.id_count + 2:
        raise InvalidKeyError(
            key, f"{kind.value} keys must have {kind.id_count + 2} segments"
        )
    if segments[-1] != KEY_SUFFIX:
        raise InvalidKeyError(key, f"key must end with ':{KEY_SUFFIX}'")

    if kind is DetailKind.SEASON:
        ids = (
            _parse_number(key, segments[1], name="tv id", allow_zero=False),
            _parse_number(key, segments[2], name="season number", allow_zero=True),
        )
    else:
        ids = (_parse_number(key, segments[1], name="id", allow_zero=False),)
    return DetailKey(kind=kind, ids=ids)


def _require_id(value: int, name: str, *, allow_zero: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidKeyError(value, f"{name} must be an int")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidKeyError(value, f"{name} is out of range")
    return value


def show_key(show_id: int) -> str:
    return str(DetailKey(DetailKind.SHOW, (_require_id(show_id, "show id"),)))


def season_key(tv_id: int, season_number: int) -> str:
    ids = (
        _require_id(tv_id, "tv id"),
        _require_id(season_number, "season number", allow_zero=True),
    )
    return str(DetailKey(DetailKind.SEASON, ids))


def movie_key(movie_id: int) -> str:
    return str(DetailKey(DetailKind.MOVIE, (_require_id(movie_id, "movie id"),)))


def person_key(person_id: int) -> str:
    return str(DetailKey(DetailKind.PERSON, (_require_id(person_id, "person id"),)))


__all__ = [
    "DetailKind",
    "DetailKey",
    "parse_key",
    "show_key",
    "season_key",
    "movie_key",
    "person_key",
]
