from priceoracle.backfill.engine import BackfillEngine, DayOutcome, batched, each_day
from priceoracle.backfill.runner import JobRunner

__all__ = [
    "BackfillEngine",
    "DayOutcome",
    "JobRunner",
    "batched",
    "each_day",
]
