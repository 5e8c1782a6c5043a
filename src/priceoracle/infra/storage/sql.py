"""Durable store backed by PostgreSQL through SQLAlchemy asyncio."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from enum import Enum

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from priceoracle.db.models import BackfillJobRecord, TokenPrice
from priceoracle.domain.enums import JobStatus, PriceSource
from priceoracle.domain.models import BackfillJob, PriceRecord
from priceoracle.exceptions import BackendUnavailableError
from priceoracle.infra.storage.base import PriceStoreBackend

logger = logging.getLogger(__name__)


def _utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; every stored datetime is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_price(row: TokenPrice) -> PriceRecord:
    return PriceRecord(
        token=row.token,
        network=row.network,
        date=row.date,
        price=row.price,
        source=PriceSource(row.source),
        timestamp=row.timestamp,
    )


def _to_job(row: BackfillJobRecord) -> BackfillJob:
    return BackfillJob(
        job_id=row.job_id,
        token=row.token,
        network=row.network,
        creation_date=_utc(row.creation_date),
        status=JobStatus(row.status),
        total_days=row.total_days,
        processed_days=row.processed_days,
        error=row.error,
        started_at=_utc(row.started_at),
        completed_at=_utc(row.completed_at),
    )


class SqlPriceBackend(PriceStoreBackend):
    name = "postgres"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            raise BackendUnavailableError(self.name, operation, e) from e

    async def put_price(self, record: PriceRecord) -> PriceRecord:
        async with self._session("put_price") as session:
            session.add(
                TokenPrice(
                    token=record.token,
                    network=record.network,
                    date=record.date,
                    price=record.price,
                    source=record.source.value,
                    timestamp=record.timestamp,
                )
            )
            try:
                await session.commit()
            except IntegrityError:
                # Duplicate key: another writer recorded this day first
                await session.rollback()
                logger.debug("Price for %s/%s on %s already recorded", record.token, record.network, record.date)
                existing = await self._select_price(session, record.token, record.network, record.date)
                return _to_price(existing) if existing is not None else record
            return record

    async def get_price(self, token: str, network: str, day: date) -> PriceRecord | None:
        async with self._session("get_price") as session:
            row = await self._select_price(session, token, network, day)
            return _to_price(row) if row is not None else None

    async def get_prices_in_range(self, token: str, network: str, start: date, end: date) -> list[PriceRecord]:
        async with self._session("get_prices_in_range") as session:
            result = await session.execute(
                select(TokenPrice)
                .where(
                    TokenPrice.token == token,
                    TokenPrice.network == network,
                    TokenPrice.date >= start,
                    TokenPrice.date <= end,
                )
                .order_by(TokenPrice.date.asc())
            )
            return [_to_price(row) for row in result.scalars().all()]

    async def get_price_before(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        async with self._session("get_price_before") as session:
            result = await session.execute(
                select(TokenPrice)
                .where(TokenPrice.token == token, TokenPrice.network == network, TokenPrice.timestamp <= timestamp)
                .order_by(TokenPrice.timestamp.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_price(row) if row is not None else None

    async def get_price_after(self, token: str, network: str, timestamp: int) -> PriceRecord | None:
        async with self._session("get_price_after") as session:
            result = await session.execute(
                select(TokenPrice)
                .where(TokenPrice.token == token, TokenPrice.network == network, TokenPrice.timestamp >= timestamp)
                .order_by(TokenPrice.timestamp.asc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_price(row) if row is not None else None

    async def create_job(self, job: BackfillJob) -> BackfillJob:
        async with self._session("create_job") as session:
            row = BackfillJobRecord(
                job_id=job.job_id,
                token=job.token,
                network=job.network,
                creation_date=job.creation_date,
                status=job.status.value,
                total_days=job.total_days,
                processed_days=job.processed_days,
            )
            session.add(row)
            await session.commit()
            return _to_job(row)

    async def update_job(self, job_id: str, **fields: object) -> BackfillJob | None:
        async with self._session("update_job") as session:
            row = await self._select_job(session, job_id)
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value.value if isinstance(value, Enum) else value)
            await session.commit()
            return _to_job(row)

    async def get_job(self, job_id: str) -> BackfillJob | None:
        async with self._session("get_job") as session:
            row = await self._select_job(session, job_id)
            return _to_job(row) if row is not None else None

    @staticmethod
    async def _select_price(session: AsyncSession, token: str, network: str, day: date) -> TokenPrice | None:
        result = await session.execute(
            select(TokenPrice).where(
                TokenPrice.token == token,
                TokenPrice.network == network,
                TokenPrice.date == day,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _select_job(session: AsyncSession, job_id: str) -> BackfillJobRecord | None:
        result = await session.execute(select(BackfillJobRecord).where(BackfillJobRecord.job_id == job_id))
        return result.scalar_one_or_none()
