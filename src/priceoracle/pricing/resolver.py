"""PriceResolver — cache → store → live source → interpolation, first hit wins."""

import logging

from priceoracle.domain.enums import PriceSource
from priceoracle.domain.models import PriceRecord, PriceResult, day_of, normalize_token
from priceoracle.exceptions import PriceNotFoundError, PriceOracleError
from priceoracle.infra.cache import PriceCache
from priceoracle.infra.price import PriceSourceClient
from priceoracle.infra.storage import PriceStore
from priceoracle.pricing.interpolation import InterpolationEngine

logger = logging.getLogger(__name__)


def cache_key(token: str, network: str, timestamp: int) -> str:
    return f"price:{token}:{network}:{timestamp}"


class PriceResolver:
    def __init__(
        self,
        cache: PriceCache,
        store: PriceStore,
        source: PriceSourceClient,
        interpolation: InterpolationEngine,
        cache_ttl: int = 300,
    ) -> None:
        self._cache = cache
        self._store = store
        self._source = source
        self._interpolation = interpolation
        self._cache_ttl = cache_ttl

    async def resolve(self, token: str, network: str, timestamp: int) -> PriceResult:
        """Price of `token` on `network` at `timestamp`.

        Raises PriceNotFoundError when no tier can produce a price.
        """
        token = normalize_token(token)
        key = cache_key(token, network, timestamp)

        # 1. Cache
        cached = await self._cache.get(key)
        if cached is not None:
            return PriceResult.from_cache_payload(cached)

        # 2. Stored price for the calendar day
        day = day_of(timestamp)
        stored = await self._store.get_price(token, network, day)
        if stored is not None:
            result = PriceResult(price=stored.price, source=stored.source, timestamp=timestamp)
            await self._remember(key, result)
            return result

        # 3. Live source
        try:
            price = await self._source.get_spot_price(token, network, day)
        except PriceOracleError:
            logger.warning(
                "Live price fetch failed for %s on %s (%s), trying interpolation",
                token, network, day, exc_info=True,
            )
            price = None

        if price is not None:
            record = await self._store.put_price(PriceRecord.for_day(token, network, day, price, PriceSource.LIVE))
            result = PriceResult(price=record.price, source=record.source, timestamp=timestamp)
            await self._remember(key, result)
            return result

        # 4. Interpolation from stored neighbours
        result = await self._interpolation.interpolate(token, network, timestamp)
        if result is None:
            raise PriceNotFoundError(token, network, timestamp)
        await self._remember(key, result)
        return result

    async def _remember(self, key: str, result: PriceResult) -> None:
        await self._cache.set(key, result.to_cache_payload(), self._cache_ttl)
