from priceoracle.pricing.interpolation import InterpolationEngine, NearestPrices, interpolate_price
from priceoracle.pricing.resolver import PriceResolver, cache_key

__all__ = [
    "InterpolationEngine",
    "NearestPrices",
    "PriceResolver",
    "cache_key",
    "interpolate_price",
]
