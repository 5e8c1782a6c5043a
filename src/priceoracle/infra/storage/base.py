"""Backend interface shared by the durable SQL store and the in-process store."""

from abc import ABC, abstractmethod
from datetime import date

from priceoracle.domain.models import BackfillJob, PriceRecord


class PriceStoreBackend(ABC):
    """Persistence for daily prices and backfill jobs.

    Durable implementations raise BackendUnavailableError when they cannot serve a call.
    """

    name: str = "backend"

    @abstractmethod
    async def put_price(self, record: PriceRecord) -> PriceRecord:
        """Persist a price. If the key already exists, return the stored record unchanged."""

    @abstractmethod
    async def get_price(self, token: str, network: str, day: date) -> PriceRecord | None: ...

    @abstractmethod
    async def get_prices_in_range(self, token: str, network: str, start: date, end: date) -> list[PriceRecord]:
        """Records with start <= date <= end, ordered by date."""

    @abstractmethod
    async def get_price_before(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        """Record with the greatest timestamp <= the given one."""

    @abstractmethod
    async def get_price_after(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        """Record with the smallest timestamp >= the given one."""

    @abstractmethod
    async def create_job(self, job: BackfillJob) -> BackfillJob: ...

    @abstractmethod
    async def update_job(self, job_id: str, **fields: object) -> BackfillJob | None: ...

    @abstractmethod
    async def get_job(self, job_id: str) -> BackfillJob | None: ...
