import sys
from pathlib import Path

import pytest

# Ensure package root is importable when tests are executed directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeClock:
    """Manually advanced clock used in place of ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep developer environment variables out of settings-driven tests."""

    for name in (
        "TMDB_API_KEY",
        "TMDB_BASE_URL",
        "TMDB_LANGUAGE",
        "TMDB_TIMEOUT",
        "CACHE_DIR",
        "CACHE_DISK_ENABLED",
        "CACHE_TTL_SECONDS",
        "CACHE_COUNT_LIMIT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "settings-cache"))
