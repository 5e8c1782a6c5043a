from priceoracle.domain.models.job import BackfillJob, JobStatusView
from priceoracle.domain.models.price import PriceRecord, PriceResult, day_of, day_start, normalize_token

__all__ = [
    "BackfillJob",
    "JobStatusView",
    "PriceRecord",
    "PriceResult",
    "day_of",
    "day_start",
    "normalize_token",
]
