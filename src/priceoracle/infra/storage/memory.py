"""In-process store used when the durable backend is unreachable. Lost on restart."""

from datetime import date

from priceoracle.domain.models import BackfillJob, PriceRecord
from priceoracle.infra.storage.base import PriceStoreBackend


class InMemoryPriceBackend(PriceStoreBackend):
    name = "memory"

    def __init__(self) -> None:
        self._prices: dict[tuple[str, str, date], PriceRecord] = {}
        self._jobs: dict[str, BackfillJob] = {}

    async def put_price(self, record: PriceRecord) -> PriceRecord:
        # First write wins: price history is immutable once recorded
        return self._prices.setdefault((record.token, record.network, record.date), record)

    async def get_price(self, token: str, network: str, day: date) -> PriceRecord | None:
        return self._prices.get((token, network, day))

    async def get_prices_in_range(self, token: str, network: str, start: date, end: date) -> list[PriceRecord]:
        matches = [r for r in self._series(token, network) if start <= r.date <= end]
        return sorted(matches, key=lambda r: r.date)

    async def get_price_before(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        candidates = [r for r in self._series(token, network) if r.timestamp <= timestamp]
        return max(candidates, key=lambda r: r.timestamp, default=None)

    async def get_price_after(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        candidates = [r for r in self._series(token, network) if r.timestamp >= timestamp]
        return min(candidates, key=lambda r: r.timestamp, default=None)

    async def create_job(self, job: BackfillJob) -> BackfillJob:
        self._jobs[job.job_id] = job
        return job

    async def update_job(self, job_id: str, **fields: object) -> BackfillJob | None:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        updated = job.model_copy(update=fields)
        self._jobs[job_id] = updated
        return updated

    async def get_job(self, job_id: str) -> BackfillJob | None:
        return self._jobs.get(job_id)

    def discard_job(self, job_id: str) -> None:
        self._jobs.pop(job_id, None)

    def _series(self, token: str, network: str) -> list[PriceRecord]:
        return [r for (t, n, _), r in self._prices.items() if t == token and n == network]
