from priceoracle.infra.cache.base import CacheBackend
from priceoracle.infra.cache.cache import PriceCache
from priceoracle.infra.cache.memory import MemoryCache
from priceoracle.infra.cache.redis_cache import RedisCache

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "PriceCache",
    "RedisCache",
]
