from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import priceoracle.db.models  # noqa: F401 — register all models
from priceoracle.db.session import Base
from priceoracle.domain.models import BackfillJob
from priceoracle.exceptions import BackendUnavailableError
from priceoracle.infra.cache import MemoryCache, PriceCache
from priceoracle.infra.storage import InMemoryPriceBackend, PriceStore, PriceStoreBackend, SqlPriceBackend

TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
NETWORK = "ethereum"

# 2024-01-01 .. 2024-01-03, 00:00 UTC
JAN_1 = 1704067200
JAN_2 = 1704153600
JAN_3 = 1704240000


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
def sql_store(session_factory) -> PriceStore:
    return PriceStore(SqlPriceBackend(session_factory), InMemoryPriceBackend())


@pytest.fixture()
def memory_store() -> PriceStore:
    return PriceStore(durable=None)


@pytest.fixture()
def memory_cache() -> PriceCache:
    return PriceCache(durable=None, fallback=MemoryCache())


@pytest.fixture()
def source():
    """Price source that knows nothing unless a test says otherwise."""
    mock = MagicMock()
    mock.get_spot_price = AsyncMock(return_value=None)
    mock.get_creation_date = AsyncMock(return_value=datetime(2024, 1, 1, tzinfo=UTC))
    return mock


class FlakyBackend(PriceStoreBackend):
    """Durable backend stand-in that fails every call while `down` is set."""

    name = "flaky"

    def __init__(self) -> None:
        self.down = True
        self.inner = InMemoryPriceBackend()

    def _check(self, operation: str) -> None:
        if self.down:
            raise BackendUnavailableError(self.name, operation, ConnectionRefusedError("refused"))

    async def put_price(self, record):
        self._check("put_price")
        return await self.inner.put_price(record)

    async def get_price(self, token, network, day):
        self._check("get_price")
        return await self.inner.get_price(token, network, day)

    async def get_prices_in_range(self, token, network, start, end):
        self._check("get_prices_in_range")
        return await self.inner.get_prices_in_range(token, network, start, end)

    async def get_price_before(self, token, network, timestamp):
        self._check("get_price_before")
        return await self.inner.get_price_before(token, network, timestamp)

    async def get_price_after(self, token, network, timestamp):
        self._check("get_price_after")
        return await self.inner.get_price_after(token, network, timestamp)

    async def create_job(self, job: BackfillJob):
        self._check("create_job")
        return await self.inner.create_job(job)

    async def update_job(self, job_id, **fields):
        self._check("update_job")
        return await self.inner.update_job(job_id, **fields)

    async def get_job(self, job_id):
        self._check("get_job")
        return await self.inner.get_job(job_id)
