"""PriceCache — Redis first, in-process expiring map when Redis is unavailable."""

import logging

from priceoracle.exceptions import BackendUnavailableError
from priceoracle.infra.cache.base import CacheBackend
from priceoracle.infra.cache.memory import MemoryCache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class PriceCache:
    def __init__(
        self,
        durable: CacheBackend | None,
        fallback: MemoryCache | None = None,
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._durable = durable
        self._fallback = fallback or MemoryCache()
        self._default_ttl = default_ttl

    async def get(self, key: str) -> dict | None:
        if self._durable is not None:
            try:
                return await self._durable.get(key)
            except BackendUnavailableError as e:
                logger.warning("Cache get failed, using in-memory fallback: %s", e)
        return await self._fallback.get(key)

    async def set(self, key: str, value: dict, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if self._durable is not None:
            try:
                await self._durable.set(key, value, ttl)
                return
            except BackendUnavailableError as e:
                logger.warning("Cache set failed, using in-memory fallback: %s", e)
        await self._fallback.set(key, value, ttl)
