import json
import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from priceoracle.exceptions import BackendUnavailableError
from priceoracle.infra.cache.base import CacheBackend

logger = logging.getLogger(__name__)


class RedisCache(CacheBackend):
    """JSON values in Redis with per-key expiry (SETEX)."""

    name = "redis"

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def get(self, key: str) -> dict | None:
        try:
            raw = await self._redis.get(key)
        except (RedisError, OSError) as e:
            raise BackendUnavailableError(self.name, "get", e) from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: dict, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(key, ttl_seconds, json.dumps(value))
        except (RedisError, OSError) as e:
            raise BackendUnavailableError(self.name, "set", e) from e
