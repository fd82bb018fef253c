import anyio
import pytest

from tennis_tracker.cache import TTLCache


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.mark.anyio
async def test_entries_expire():
    cache = TTLCache(ttl_seconds=10)
    await cache.set(1, "stats", {"wins": 1})
    assert await cache.get(1, "stats") == {"wins": 1}
    await cache.set(1, "stats", {"wins": 2}, ttl_seconds=0.01)
    await anyio.sleep(0.05)
    assert await cache.get(1, "stats") is None
    assert len(cache) == 0


@pytest.mark.anyio
async def test_zero_ttl_disables_caching():
    cache = TTLCache(ttl_seconds=0)
    await cache.set(1, "stats", "x")
    assert await cache.get(1, "stats") is None


@pytest.mark.anyio
async def test_invalidate_users_drops_only_their_entries():
    cache = TTLCache()
    await cache.set(1, "stats", "a")
    await cache.set(1, "opponents", "b")
    await cache.set(2, "stats", "c")
    await cache.invalidate_users([1, None])
    assert await cache.get(1, "stats") is None
    assert await cache.get(1, "opponents") is None
    assert await cache.get(2, "stats") == "c"
    await cache.clear()
    assert len(cache) == 0
