"""PriceStore — durable backend first, in-process backend when it is unavailable.

Price writes that fall back are not replayed against the durable backend later. During
a partial outage some records may live only in memory for the life of the process;
this is surfaced in logs only. Job state written to memory is carried to the durable
backend by the next successful update of that job.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import TypeVar

from priceoracle.domain.enums import JobStatus
from priceoracle.domain.models import BackfillJob, PriceRecord
from priceoracle.exceptions import BackendUnavailableError
from priceoracle.infra.storage.base import PriceStoreBackend
from priceoracle.infra.storage.memory import InMemoryPriceBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PriceStore:
    """The only writer of PriceRecord and BackfillJob entities."""

    def __init__(self, durable: PriceStoreBackend | None, fallback: InMemoryPriceBackend | None = None) -> None:
        self._durable = durable
        self._fallback = fallback or InMemoryPriceBackend()

    async def _call(self, operation: str, fn: Callable[[PriceStoreBackend], Awaitable[T]]) -> T:
        if self._durable is not None:
            try:
                return await fn(self._durable)
            except BackendUnavailableError as e:
                logger.warning("Store %s failed, using in-memory fallback: %s", operation, e)
        return await fn(self._fallback)

    async def put_price(self, record: PriceRecord) -> PriceRecord:
        return await self._call("put_price", lambda b: b.put_price(record))

    async def get_price(self, token: str, network: str, day: date) -> PriceRecord | None:
        return await self._call("get_price", lambda b: b.get_price(token, network, day))

    async def get_prices_in_range(self, token: str, network: str, start: date, end: date) -> list[PriceRecord]:
        return await self._call("get_prices_in_range", lambda b: b.get_prices_in_range(token, network, start, end))

    async def get_price_before(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        return await self._call("get_price_before", lambda b: b.get_price_before(token, network, timestamp))

    async def get_price_after(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        return await self._call("get_price_after", lambda b: b.get_price_after(token, network, timestamp))

    async def create_job(self, token: str, network: str, job_id: str, creation_date: datetime) -> BackfillJob:
        job = BackfillJob(
            job_id=job_id,
            token=token,
            network=network,
            creation_date=creation_date,
            status=JobStatus.PENDING,
        )
        return await self._call("create_job", lambda b: b.create_job(job))

    async def update_job(self, job_id: str, **fields: object) -> BackfillJob | None:
        """Apply partial fields to a job; None when no backend knows it.

        A job that has a copy in memory (written there during an outage) is read from that
        copy, and the next durable write carries the copy's state across and drops it.
        """
        if self._durable is None:
            return await self._fallback.update_job(job_id, **fields)

        shadow = await self._fallback.get_job(job_id)
        durable_fields = {**shadow.model_dump(include=_JOB_STATE), **fields} if shadow is not None else fields
        try:
            job = await self._durable.update_job(job_id, **durable_fields)
        except BackendUnavailableError as e:
            logger.warning("Store update_job failed, using in-memory fallback: %s", e)
            return await self._fallback.update_job(job_id, **fields)

        if job is None:
            # Created in memory while the durable backend was down
            return await self._fallback.update_job(job_id, **fields)
        if shadow is not None:
            self._fallback.discard_job(job_id)
            logger.info("Backfill job %s reconciled with %s", job_id, self._durable.name)
        return job

    async def get_job(self, job_id: str) -> BackfillJob | None:
        shadow = await self._fallback.get_job(job_id)
        if shadow is not None or self._durable is None:
            return shadow
        return await self._call("get_job", lambda b: b.get_job(job_id))

    async def shadow_job(self, job: BackfillJob) -> BackfillJob:
        """Hold a job snapshot in memory when no backend could apply an update to it."""
        return await self._fallback.create_job(job)


_JOB_STATE = {"status", "total_days", "processed_days", "error", "started_at", "completed_at"}
