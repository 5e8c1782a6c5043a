from priceoracle.infra.storage.base import PriceStoreBackend
from priceoracle.infra.storage.memory import InMemoryPriceBackend
from priceoracle.infra.storage.sql import SqlPriceBackend
from priceoracle.infra.storage.store import PriceStore

__all__ = [
    "InMemoryPriceBackend",
    "PriceStore",
    "PriceStoreBackend",
    "SqlPriceBackend",
]
