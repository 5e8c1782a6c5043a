from priceoracle.db.models.backfill_job import BackfillJobRecord
from priceoracle.db.models.token_price import TokenPrice

__all__ = [
    "BackfillJobRecord",
    "TokenPrice",
]
