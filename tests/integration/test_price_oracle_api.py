from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from priceoracle.api.deps import get_backfill_engine, get_resolver, get_store
from priceoracle.api.main import app
from priceoracle.backfill import BackfillEngine, JobRunner
from priceoracle.domain.models import PriceRecord
from priceoracle.pricing import InterpolationEngine, PriceResolver

from tests.conftest import JAN_1, JAN_2, JAN_3, NETWORK, TOKEN


@pytest.fixture()
def runner() -> JobRunner:
    return JobRunner()


@pytest.fixture()
async def client(sql_store, memory_cache, source, runner):
    resolver = PriceResolver(memory_cache, sql_store, source, InterpolationEngine(sql_store))
    engine = BackfillEngine(
        sql_store,
        source,
        runner,
        batch_size=1,
        batch_delay=0,
        clock=lambda: datetime(2024, 1, 3, 12, tzinfo=UTC),
    )

    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_backfill_engine] = lambda: engine
    app.dependency_overrides[get_store] = lambda: sql_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await runner.shutdown()


async def _seed(store, *prices: tuple[int, str]) -> None:
    for day, price in prices:
        await store.put_price(PriceRecord.for_day(TOKEN, NETWORK, date(2024, 1, day), Decimal(price)))


class TestPriceEndpoint:
    async def test_stored_price(self, client, sql_store):
        await _seed(sql_store, (1, "1.25"))

        res = await client.get("/api/price-oracle/price", params={"token": TOKEN, "network": NETWORK, "timestamp": JAN_1 + 3600})

        assert res.status_code == 200
        data = res.json()
        assert Decimal(data["price"]) == Decimal("1.25")
        assert data["source"] == "live"
        assert data["timestamp"] == JAN_1 + 3600
        assert data["cached"] is False
        assert data["interpolation"] is None

    async def test_second_request_is_cached(self, client, sql_store):
        await _seed(sql_store, (1, "1.25"))
        params = {"token": TOKEN, "network": NETWORK, "timestamp": JAN_1}

        await client.get("/api/price-oracle/price", params=params)
        res = await client.get("/api/price-oracle/price", params=params)

        assert res.json()["cached"] is True

    async def test_interpolated_price(self, client, sql_store):
        await _seed(sql_store, (1, "10"), (3, "20"))

        res = await client.get("/api/price-oracle/price", params={"token": TOKEN.upper(), "network": NETWORK, "timestamp": JAN_2})

        assert res.status_code == 200
        data = res.json()
        assert data["source"] == "interpolated"
        assert Decimal(data["price"]) == Decimal("15")
        assert data["interpolation"]["before_price"]["date"] == "2024-01-01"
        assert data["interpolation"]["after_price"]["timestamp"] == JAN_3

    async def test_no_price_is_404(self, client):
        res = await client.get("/api/price-oracle/price", params={"token": TOKEN, "network": NETWORK, "timestamp": JAN_1})

        assert res.status_code == 404
        assert res.json()["detail"] == "No price data available for the specified token and timestamp"

    async def test_unsupported_network_is_422(self, client):
        res = await client.get("/api/price-oracle/price", params={"token": TOKEN, "network": "solana", "timestamp": JAN_1})

        assert res.status_code == 422

    async def test_blank_token_is_422(self, client, source):
        res = await client.get("/api/price-oracle/price", params={"token": "   ", "network": NETWORK, "timestamp": JAN_1})

        assert res.status_code == 422
        source.get_spot_price.assert_not_awaited()

    async def test_missing_timestamp_is_422(self, client):
        res = await client.get("/api/price-oracle/price", params={"token": TOKEN, "network": NETWORK})

        assert res.status_code == 422


class TestBackfillEndpoints:
    async def test_schedule_then_poll(self, client, runner, source, sql_store):
        source.get_spot_price.return_value = Decimal("1")

        res = await client.post("/api/price-oracle/schedule", json={"token": TOKEN.upper(), "network": NETWORK})

        assert res.status_code == 202
        data = res.json()
        assert data["message"] == "Price history fetch scheduled"
        assert data["status"] == "pending"
        assert data["token"] == TOKEN
        assert data["creation_date"].startswith("2024-01-01")

        await runner.drain()
        res = await client.get(f"/api/price-oracle/jobs/{data['job_id']}")

        assert res.status_code == 200
        job = res.json()
        assert job["status"] == "completed"
        assert job["progress"] == 100
        assert job["total_days"] == 3
        assert job["processed_days"] == 3
        assert len(await sql_store.get_prices_in_range(TOKEN, NETWORK, date(2024, 1, 1), date(2024, 1, 3))) == 3

    async def test_schedule_rejects_blank_token(self, client):
        res = await client.post("/api/price-oracle/schedule", json={"token": "  ", "network": NETWORK})

        assert res.status_code == 422

    async def test_schedule_rejects_unknown_network(self, client):
        res = await client.post("/api/price-oracle/schedule", json={"token": TOKEN, "network": "bitcoin"})

        assert res.status_code == 422

    async def test_unknown_job_is_404(self, client):
        res = await client.get("/api/price-oracle/jobs/does-not-exist")

        assert res.status_code == 404
        assert res.json()["detail"] == "Job not found"


class TestHistoryEndpoint:
    async def test_range(self, client, sql_store):
        await _seed(sql_store, (1, "1"), (2, "2"), (3, "3"))

        res = await client.get(
            "/api/price-oracle/history",
            params={"token": TOKEN, "network": NETWORK, "start": "2024-01-02", "end": "2024-01-03"},
        )

        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 2
        assert [p["date"] for p in data["prices"]] == ["2024-01-02", "2024-01-03"]
        assert data["first_date"] == "2024-01-02"
        assert data["last_date"] == "2024-01-03"

    async def test_default_window_is_last_30_days(self, client, sql_store):
        today = datetime.now(UTC).date()
        for offset in (0, 30, 31):
            await sql_store.put_price(PriceRecord.for_day(TOKEN, NETWORK, today - timedelta(days=offset), Decimal("1")))

        res = await client.get("/api/price-oracle/history", params={"token": TOKEN, "network": NETWORK})

        assert res.json()["total"] == 2

    async def test_blank_token_is_422(self, client):
        res = await client.get("/api/price-oracle/history", params={"token": " ", "network": NETWORK})

        assert res.status_code == 422

    async def test_start_after_end_is_400(self, client):
        res = await client.get(
            "/api/price-oracle/history",
            params={"token": TOKEN, "network": NETWORK, "start": "2024-01-03", "end": "2024-01-01"},
        )

        assert res.status_code == 400


async def test_health(client):
    res = await client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
