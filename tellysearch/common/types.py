"""Type definitions for TMDb detail records cached by TellySearch."""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class _TMDbModel(BaseModel):
    """Base model that tolerates TMDb fields we do not track and rejects NaN/inf."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class Genre(_TMDbModel):
    id: int
    name: str


class CastMember(_TMDbModel):
    """Actor credit attached to a movie, show or season."""

    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None
    order: Optional[int] = None


class CrewMember(_TMDbModel):
    """Crew credit attached to a movie, show, season or episode."""

    id: int
    name: str
    job: Optional[str] = None
    department: Optional[str] = None
    profile_path: Optional[str] = None


class Credits(_TMDbModel):
    cast: List[CastMember] = Field(default_factory=list)
    crew: List[CrewMember] = Field(default_factory=list)


class MediaSummary(_TMDbModel):
    """Compact movie or show record used in recommendation lists."""

    id: int
    title: Optional[str] = None
    name: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or self.name or ""


class MediaPage(_TMDbModel):
    page: int = 1
    results: List[MediaSummary] = Field(default_factory=list)


class MovieDetail(_TMDbModel):
    """Movie detail record with credits and recommendations appended."""

    id: Optional[int] = None
    title: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None
    vote_average: Optional[float] = None
    genres: List[Genre] = Field(default_factory=list)
    tagline: Optional[str] = None
    release_date: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    credits: Optional[Credits] = None
    recommendations: Optional[MediaPage] = None


class ShowCreator(_TMDbModel):
    id: int
    name: str
    profile_path: Optional[str] = None


class SeasonSummary(_TMDbModel):
    season_number: int
    name: str
    air_date: Optional[str] = None
    episode_count: Optional[int] = None
    poster_path: Optional[str] = None


class ShowDetail(_TMDbModel):
    """TV show detail record with credits and recommendations appended."""

    id: Optional[int] = None
    name: Optional[str] = None
    overview: Optional[str] = None
    tagline: Optional[str] = None
    vote_average: Optional[float] = None
    first_air_date: Optional[str] = None
    last_air_date: Optional[str] = None
    episode_run_time: List[int] = Field(default_factory=list)
    genres: List[Genre] = Field(default_factory=list)
    created_by: List[ShowCreator] = Field(default_factory=list)
    seasons: List[SeasonSummary] = Field(default_factory=list)
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    credits: Optional[Credits] = None
    recommendations: Optional[MediaPage] = None


class Episode(_TMDbModel):
    episode_number: int
    name: str
    overview: str = ""
    air_date: Optional[str] = None
    still_path: Optional[str] = None
    crew: List[CrewMember] = Field(default_factory=list)
    guest_stars: List[CastMember] = Field(default_factory=list)


class SeasonDetail(_TMDbModel):
    """Season detail record including its episodes."""

    id: Optional[int] = None
    name: Optional[str] = None
    season_number: Optional[int] = None
    air_date: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    episodes: List[Episode] = Field(default_factory=list)
    credits: Optional[Credits] = None


class PersonCredit(_TMDbModel):
    """Movie or TV credit from a person's combined credits."""

    id: int
    media_type: Optional[str] = None
    title: Optional[str] = None
    name: Optional[str] = None
    character: Optional[str] = None
    job: Optional[str] = None
    department: Optional[str] = None
    poster_path: Optional[str] = None
    vote_count: Optional[int] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None


class CombinedCredits(_TMDbModel):
    cast: List[PersonCredit] = Field(default_factory=list)
    crew: List[PersonCredit] = Field(default_factory=list)


class PersonDetail(_TMDbModel):
    """Person detail record with combined movie and TV credits."""

    id: int
    name: str
    biography: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None
    place_of_birth: Optional[str] = None
    known_for_department: Optional[str] = None
    profile_path: Optional[str] = None
    combined_credits: Optional[CombinedCredits] = None


DetailRecord = ShowDetail | SeasonDetail | MovieDetail | PersonDetail

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | Sequence["JSONValue"] | Mapping[str, "JSONValue"]
JSONMapping: TypeAlias = Mapping[str, JSONValue]


__all__ = [
    "Genre",
    "CastMember",
    "CrewMember",
    "Credits",
    "MediaSummary",
    "MediaPage",
    "MovieDetail",
    "ShowCreator",
    "SeasonSummary",
    "ShowDetail",
    "Episode",
    "SeasonDetail",
    "PersonCredit",
    "CombinedCredits",
    "PersonDetail",
    "DetailRecord",
    "JSONMapping",
]
