"""Linear interpolation between the nearest stored daily prices."""

from decimal import Decimal
from typing import NamedTuple

from priceoracle.domain.enums import PriceSource
from priceoracle.domain.models import PriceRecord, PriceResult
from priceoracle.infra.storage import PriceStore


def interpolate_price(
    target: int,
    before_ts: int,
    before_price: Decimal,
    after_ts: int,
    after_price: Decimal,
) -> Decimal:
    """Price on the straight line between (before_ts, before_price) and (after_ts, after_price)."""
    if before_ts == after_ts:
        return before_price
    return before_price + (after_price - before_price) * (target - before_ts) / (after_ts - before_ts)


class NearestPrices(NamedTuple):
    before: PriceRecord | None
    after: PriceRecord | None


class InterpolationEngine:
    """Estimates prices from stored records only (never from the cache)."""

    def __init__(self, store: PriceStore) -> None:
        self._store = store

    async def find_nearest(self, token: str, network: str, target: int) -> NearestPrices:
        before = await self._store.get_price_before(token, network, target)
        after = await self._store.get_price_after(token, network, target)
        return NearestPrices(before, after)

    async def interpolate(self, token: str, network: str, target: int) -> PriceResult | None:
        """Interpolated result, or None when no stored price exists on either side.

        With a single side available its price is used verbatim and the other side stays None.
        """
        before, after = await self.find_nearest(token, network, target)

        if before is not None and after is not None:
            price = interpolate_price(target, before.timestamp, before.price, after.timestamp, after.price)
        elif before is not None:
            price = before.price
        elif after is not None:
            price = after.price
        else:
            return None

        return PriceResult(
            price=price,
            source=PriceSource.INTERPOLATED,
            timestamp=target,
            before=before,
            after=after,
        )
