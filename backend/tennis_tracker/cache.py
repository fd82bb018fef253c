"""Short-lived cache for per-user aggregates served by the users router."""

from __future__ import annotations

from asyncio import Lock
from collections.abc import Iterable
from dataclasses import dataclass
import time
from typing import Any

from .config import STATS_CACHE_TTL_SECONDS


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """In-memory ``(user_id, view)`` entries that expire after a fixed TTL.

    A TTL of zero disables caching entirely.
    """

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._entries: dict[tuple[int, str], _Entry] = {}

    async def get(self, user_id: int, view: str) -> Any | None:
        key = (user_id, view)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= time.monotonic():
                del self._entries[key]
                return None
            return entry.value

    async def set(
        self, user_id: int, view: str, value: Any, ttl_seconds: float | None = None
    ) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        key = (user_id, view)
        async with self._lock:
            if ttl <= 0:
                self._entries.pop(key, None)
                return
            self._entries[key] = _Entry(value, time.monotonic() + ttl)

    async def invalidate_users(self, user_ids: Iterable[int | None]) -> None:
        stale = {uid for uid in user_ids if uid is not None}
        if not stale:
            return
        async with self._lock:
            for key in [k for k in self._entries if k[0] in stale]:
                del self._entries[key]

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


user_stats_cache = TTLCache(ttl_seconds=STATS_CACHE_TTL_SECONDS)
