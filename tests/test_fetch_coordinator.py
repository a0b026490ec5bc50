import asyncio
import json

import pytest

from tellysearch.cache.coordinator import FetchCoordinator
from tellysearch.cache.disk import DiskTier
from tellysearch.cache.facade import DetailCache
from tellysearch.cache.memory import MemoryTier
from tellysearch.common.keys import DetailKind
from tellysearch.common.types import MovieDetail
from tellysearch.errors import InvalidKeyError, NetworkFetchError

FIGHT_CLUB = json.dumps({"id": 550, "title": "Fight Club", "runtime": 139}).encode()


def _coordinator(tmp_path, clock):
    cache = DetailCache(
        DetailKind.MOVIE,
        memory=MemoryTier(50, 60, clock=clock),
        disk=DiskTier(tmp_path, "MovieDetail", 60, clock=clock),
    )
    return FetchCoordinator(cache)


def test_concurrent_requests_share_one_fetch(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return FIGHT_CLUB

    async def main():
        results = await asyncio.gather(
            *(coordinator.resolve("movie:550:detail", fetch) for _ in range(10))
        )
        return results

    results = asyncio.run(main())

    assert calls == 1
    assert all(result == results[0] for result in results)
    assert results[0].title == "Fight Club"
    assert coordinator.in_flight == 0
    assert coordinator.cache.disk.get("movie:550:detail") is not None


def test_cached_value_skips_fetch(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    coordinator.cache.store("movie:550:detail", MovieDetail(id=550, title="Cached"))

    async def fetch():
        raise AssertionError("fetch should not be called")

    result = asyncio.run(coordinator.resolve("movie:550:detail", fetch))
    assert result.title == "Cached"


def test_disk_value_skips_fetch(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    coordinator.cache.disk.put("movie:550:detail", FIGHT_CLUB)

    async def fetch():
        raise AssertionError("fetch should not be called")

    result = asyncio.run(coordinator.resolve("movie:550:detail", fetch))
    assert result.runtime == 139
    assert "movie:550:detail" in coordinator.cache.memory


def test_failure_reaches_every_waiter_and_next_call_retries(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    calls = 0

    async def failing_fetch():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        raise ConnectionError("connection reset")

    async def succeeding_fetch():
        nonlocal calls
        calls += 1
        return FIGHT_CLUB

    async def main():
        results = await asyncio.gather(
            *(coordinator.resolve("movie:550:detail", failing_fetch) for _ in range(3)),
            return_exceptions=True,
        )
        assert coordinator.in_flight == 0
        retried = await coordinator.resolve("movie:550:detail", succeeding_fetch)
        return results, retried

    results, retried = asyncio.run(main())

    assert calls == 2
    assert len(results) == 3
    for error in results:
        assert isinstance(error, NetworkFetchError)
        assert error.key == "movie:550:detail"
        assert "connection reset" in str(error)
    assert retried.title == "Fight Club"


def test_network_fetch_error_is_propagated_unchanged(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    error = NetworkFetchError("movie:550:detail", "HTTP 404", status_code=404)

    async def fetch():
        raise error

    with pytest.raises(NetworkFetchError) as excinfo:
        asyncio.run(coordinator.resolve("movie:550:detail", fetch))
    assert excinfo.value is error
    assert excinfo.value.status_code == 404


def test_malformed_response_is_not_cached(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)

    async def fetch():
        return b"<html>gateway timeout</html>"

    with pytest.raises(NetworkFetchError, match="malformed response"):
        asyncio.run(coordinator.resolve("movie:550:detail", fetch))
    assert coordinator.cache.lookup("movie:550:detail") is None
    assert coordinator.cache.disk.keys() == []


def test_cancelled_waiter_does_not_cancel_shared_load(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    release = None
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        return FIGHT_CLUB

    async def main():
        nonlocal release
        release = asyncio.Event()
        first = asyncio.create_task(coordinator.resolve("movie:550:detail", fetch))
        second = asyncio.create_task(coordinator.resolve("movie:550:detail", fetch))
        while coordinator.in_flight == 0:
            await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first
        release.set()
        return await second

    result = asyncio.run(main())
    assert calls == 1
    assert result.title == "Fight Club"
    assert coordinator.cache.lookup("movie:550:detail") == result


def test_distinct_keys_fetch_independently(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    fetched = []

    def fetch_for(movie_id):
        async def fetch():
            fetched.append(movie_id)
            return json.dumps({"id": movie_id}).encode()

        return fetch

    async def main():
        return await asyncio.gather(
            coordinator.resolve("movie:1:detail", fetch_for(1)),
            coordinator.resolve("movie:2:detail", fetch_for(2)),
        )

    first, second = asyncio.run(main())
    assert sorted(fetched) == [1, 2]
    assert (first.id, second.id) == (1, 2)


def test_invalid_key_is_rejected_before_fetch(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)

    async def fetch():
        raise AssertionError("fetch should not be called")

    with pytest.raises(InvalidKeyError):
        asyncio.run(coordinator.resolve("movie:0:detail", fetch))


def test_invalidate_forces_refetch(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return FIGHT_CLUB

    async def main():
        await coordinator.resolve("movie:550:detail", fetch)
        await coordinator.invalidate("movie:550:detail")
        await coordinator.resolve("movie:550:detail", fetch)

    asyncio.run(main())
    assert calls == 2


def test_invalidate_during_load_discards_its_result(tmp_path, clock):
    coordinator = _coordinator(tmp_path, clock)
    fetched: list[str] = []
    release = None

    async def old_fetch():
        fetched.append("old")
        await release.wait()
        return json.dumps({"id": 550, "title": "OLD"}).encode()

    async def new_fetch():
        fetched.append("new")
        return json.dumps({"id": 550, "title": "NEW"}).encode()

    async def main():
        nonlocal release
        release = asyncio.Event()
        pending = asyncio.create_task(coordinator.resolve("movie:550:detail", old_fetch))
        while not fetched:
            await asyncio.sleep(0)
        await coordinator.invalidate("movie:550:detail")
        assert coordinator.in_flight == 0
        release.set()
        stale = await pending
        fresh = await coordinator.resolve("movie:550:detail", new_fetch)
        return stale, fresh

    stale, fresh = asyncio.run(main())

    assert stale.title == "OLD"
    assert fresh.title == "NEW"
    assert fetched == ["old", "new"]
    assert coordinator.cache.lookup("movie:550:detail").title == "NEW"
    record = coordinator.cache.disk.get("movie:550:detail")
    assert coordinator.cache.serializer.decode(record).title == "NEW"
