"""In-process expiring map used when Redis is unreachable."""

import time
from collections.abc import Callable

from priceoracle.infra.cache.base import CacheBackend


class MemoryCache(CacheBackend):
    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, dict]] = {}  # key -> (expires_at, value)

    async def get(self, key: str) -> dict | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def __len__(self) -> int:
        return len(self._entries)
