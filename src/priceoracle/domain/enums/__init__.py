from priceoracle.domain.enums.network import Network
from priceoracle.domain.enums.price_source import PriceSource
from priceoracle.domain.enums.status import JobStatus

__all__ = [
    "JobStatus",
    "Network",
    "PriceSource",
]
