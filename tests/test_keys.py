import pytest

from tellysearch.common.keys import (
    DetailKey,
    DetailKind,
    movie_key,
    parse_key,
    person_key,
    season_key,
    show_key,
)
from tellysearch.errors import CacheError, InvalidKeyError


def test_builders_render_canonical_keys():
    assert show_key(1399) == "show:1399:detail"
    assert season_key(1399, 2) == "season:1399:2:detail"
    assert movie_key(550) == "movie:550:detail"
    assert person_key(287) == "person:287:detail"


def test_season_zero_is_allowed():
    assert season_key(1399, 0) == "season:1399:0:detail"
    assert parse_key("season:1399:0:detail").ids == (1399, 0)


def test_parse_key_round_trips_through_str():
    parsed = parse_key("season:1399:2:detail")
    assert parsed == DetailKey(DetailKind.SEASON, (1399, 2))
    assert str(parsed) == "season:1399:2:detail"
    assert parse_key("movie:550:detail").kind is DetailKind.MOVIE


@pytest.mark.parametrize(
    "key",
    [
        "",
        " movie:550:detail",
        "movie:550",
        "movie:550:details",
        "movie::detail",
        "movie:-1:detail",
        "movie:0:detail",
        "movie:0550:detail",
        "movie:5five0:detail",
        "movie:٥٥٠:detail",
        "season:1399:detail",
        "show:1:2:detail",
        "episode:1:detail",
        "MOVIE:550:detail",
    ],
)
def test_parse_key_rejects_malformed_keys(key):
    with pytest.raises(InvalidKeyError) as excinfo:
        parse_key(key)
    assert excinfo.value.key == key


def test_parse_key_rejects_non_strings():
    with pytest.raises(InvalidKeyError, match="must be a string"):
        parse_key(550)


def test_invalid_key_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_key("nope")
    assert issubclass(InvalidKeyError, CacheError)


@pytest.mark.parametrize(
    "call",
    [
        lambda: show_key(0),
        lambda: movie_key(-5),
        lambda: person_key(True),
        lambda: season_key(0, 1),
        lambda: season_key(1399, -1),
        lambda: movie_key("550"),
    ],
)
def test_builders_reject_bad_ids(call):
    with pytest.raises(InvalidKeyError):
        call()


def test_kind_metadata():
    assert DetailKind.SHOW.namespace == "ShowDetail"
    assert DetailKind.SEASON.namespace == "SeasonDetail"
    assert DetailKind.MOVIE.namespace == "MovieDetail"
    assert DetailKind.PERSON.namespace == "PersonDetail"
    assert DetailKind.SEASON.id_count == 2
    assert DetailKind.PERSON.id_count == 1
    assert DetailKind.MOVIE.record_type.__name__ == "MovieDetail"
