from priceoracle.infra.price.alchemy import AlchemyPriceSource
from priceoracle.infra.price.base import PriceSourceClient

__all__ = ["AlchemyPriceSource", "PriceSourceClient"]
