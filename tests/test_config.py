from pathlib import Path

import pytest
from pydantic import ValidationError

from tellysearch.config import DEFAULT_TMDB_BASE_URL, Settings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("CACHE_DIR")
    settings = Settings()
    assert settings.tmdb_api_key is None
    assert settings.tmdb_base == DEFAULT_TMDB_BASE_URL
    assert settings.tmdb_language == "en-US"
    assert settings.cache_ttl_seconds == 10800
    assert settings.cache_count_limit == 50
    assert settings.disk_cache_dir == Path.home() / ".cache" / "tellysearch"


def test_settings_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("TMDB_API_KEY", "token")
    monkeypatch.setenv("CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("CACHE_COUNT_LIMIT", "7")
    settings = Settings()
    assert settings.tmdb_api_key == "token"
    assert settings.disk_cache_dir == tmp_path
    assert settings.cache_ttl_seconds == 60.0
    assert settings.cache_count_limit == 7


def test_cache_dir_expands_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("CACHE_DIR", "~/details")
    assert Settings().cache_dir == tmp_path / "details"


def test_disk_can_be_disabled(monkeypatch):
    monkeypatch.setenv("CACHE_DISK_ENABLED", "false")
    assert Settings().disk_cache_dir is None


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CACHE_COUNT_LIMIT", "0"),
        ("CACHE_COUNT_LIMIT", "notint"),
        ("CACHE_TTL_SECONDS", "-1"),
        ("TMDB_TIMEOUT", "0"),
        ("TMDB_BASE_URL", "not a url"),
    ],
)
def test_settings_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()
