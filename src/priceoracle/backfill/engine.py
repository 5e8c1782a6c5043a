"""BackfillEngine — fills a token's daily price history from its creation date to today."""

import asyncio
import logging
import uuid
from collections import Counter
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, timedelta
from enum import Enum

from priceoracle.backfill.runner import JobRunner
from priceoracle.domain.enums import JobStatus, PriceSource
from priceoracle.domain.models import BackfillJob, JobStatusView, PriceRecord, normalize_token
from priceoracle.exceptions import JobExecutionError, PriceOracleError
from priceoracle.infra.price import PriceSourceClient
from priceoracle.infra.storage import PriceStore

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_DELAY_SECONDS = 2.0
DEFAULT_CREATION_DATE = datetime(2020, 1, 1, tzinfo=UTC)


class DayOutcome(str, Enum):
    STORED = "stored"
    EXISTING = "existing"
    NO_DATA = "no_data"
    ERROR = "error"


def each_day(start: date, end: date) -> list[date]:
    """Inclusive list of calendar days; empty when start is after end."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def batched(days: list[date], size: int) -> Iterator[list[date]]:
    for i in range(0, len(days), size):
        yield days[i : i + size]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BackfillEngine:
    """Schedules and runs backfill jobs.

    Days are processed in batches; days inside a batch run concurrently, batches run in
    order with a pause between them. Progress is written once per finished batch.
    Jobs for the same (token, network) run one at a time.
    """

    def __init__(
        self,
        store: PriceStore,
        source: PriceSourceClient,
        runner: JobRunner,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY_SECONDS,
        default_creation_date: datetime = DEFAULT_CREATION_DATE,
        clock: Callable[[], datetime] = _utcnow,
        new_job_id: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._source = source
        self._runner = runner
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._default_creation_date = default_creation_date
        self._clock = clock
        self._new_job_id = new_job_id
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._lock_users: Counter[tuple[str, str]] = Counter()
        self._snapshots: dict[str, BackfillJob] = {}  # Latest known state of running jobs

    async def schedule(self, token: str, network: str) -> BackfillJob:
        """Create a pending job and start it in the background. Never waits for the run."""
        token = normalize_token(token)
        try:
            creation_date = await self._source.get_creation_date(token, network)
        except PriceOracleError as e:
            logger.warning(
                "Creation date unavailable for %s on %s (%s), using %s",
                token, network, e, self._default_creation_date.date(),
            )
            creation_date = self._default_creation_date

        job = await self._store.create_job(token, network, self._new_job_id(), creation_date)
        self._runner.submit(job.job_id, self.run(job.job_id, job))
        logger.info("Scheduled backfill %s for %s on %s from %s", job.job_id, token, network, creation_date.date())
        return job

    async def get_status(self, job_id: str) -> JobStatusView | None:
        job = await self._store.get_job(job_id)
        if job is None:
            return None
        return JobStatusView.from_job(job)

    async def run(self, job_id: str, job: BackfillJob | None = None) -> None:
        """Execute a job. Any failure of the loop itself marks the job failed.

        `job` is the snapshot known to the scheduler; it stands in for the stored record
        when no store backend can return it.
        """
        job = await self._store.get_job(job_id) or job
        if job is None:
            logger.error("Backfill job %s not found", job_id)
            return

        async with self._exclusive(job.token, job.network):
            # Re-read after waiting on the lock
            job = await self._store.get_job(job_id) or job
            if job.status != JobStatus.PENDING:
                logger.warning("Backfill job %s is already %s, not running it again", job_id, job.status.value)
                return
            self._snapshots[job_id] = job
            try:
                await self._execute(job)
            except Exception as e:
                logger.exception("Backfill job %s failed", job_id)
                await self._write(self._snapshots[job_id], status=JobStatus.FAILED, error=str(e))
            finally:
                self._snapshots.pop(job_id, None)

    @asynccontextmanager
    async def _exclusive(self, token: str, network: str) -> AsyncIterator[None]:
        """One running job per (token, network); the lock is dropped once nobody holds or awaits it."""
        key = (token, network)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] <= 0:
                del self._lock_users[key]
                del self._locks[key]

    async def _execute(self, job: BackfillJob) -> None:
        job = await self._update(job, status=JobStatus.PROCESSING, started_at=self._clock())

        days = each_day(job.creation_date.astimezone(UTC).date(), self._clock().date())
        total = len(days)
        job = await self._update(job, total_days=total)
        logger.info("Backfill %s: %d days of prices for %s on %s", job.job_id, total, job.token, job.network)

        outcomes: Counter[DayOutcome] = Counter()
        processed = 0
        for batch in batched(days, self._batch_size):
            results = await asyncio.gather(*(self._process_day(job.token, job.network, day) for day in batch))
            outcomes.update(results)
            processed += len(batch)

            if processed < total:
                job = await self._update(job, processed_days=processed, status=JobStatus.PROCESSING)
                if self._batch_delay > 0:
                    await asyncio.sleep(self._batch_delay)
            else:
                job = await self._update(
                    job, processed_days=total, status=JobStatus.COMPLETED, completed_at=self._clock()
                )

        if total == 0:
            job = await self._update(job, processed_days=0, status=JobStatus.COMPLETED, completed_at=self._clock())

        logger.info(
            "Backfill %s completed: total=%d stored=%d existing=%d no_data=%d errors=%d",
            job.job_id, total,
            outcomes[DayOutcome.STORED], outcomes[DayOutcome.EXISTING],
            outcomes[DayOutcome.NO_DATA], outcomes[DayOutcome.ERROR],
        )

    async def _process_day(self, token: str, network: str, day: date) -> DayOutcome:
        try:
            if await self._store.get_price(token, network, day) is not None:
                return DayOutcome.EXISTING

            price = await self._source.get_spot_price(token, network, day)
            if price is None:
                logger.info("No price available for %s on %s (%s)", token, network, day)
                return DayOutcome.NO_DATA

            await self._store.put_price(PriceRecord.for_day(token, network, day, price, PriceSource.LIVE))
            return DayOutcome.STORED
        except Exception:
            # A failed day is a miss; the job carries on
            logger.warning("Backfill of %s on %s (%s) failed", token, network, day, exc_info=True)
            return DayOutcome.ERROR

    async def _update(self, job: BackfillJob, **fields: object) -> BackfillJob:
        target = fields.get("status")
        if isinstance(target, JobStatus) and not job.status.can_move_to(target):
            raise JobExecutionError(f"Illegal status change {job.status.value} -> {target.value}")
        return await self._write(job, **fields)

    async def _write(self, job: BackfillJob, **fields: object) -> BackfillJob:
        updated = await self._store.update_job(job.job_id, **fields)
        if updated is None:
            logger.warning("Backfill job %s unknown to every store backend, keeping it in memory", job.job_id)
            updated = await self._store.shadow_job(job.model_copy(update=fields))
        self._snapshots[job.job_id] = updated
        return updated
