import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class RateLimitedClient:
    """JSON-over-HTTP client that spaces requests at least 1/rate seconds apart.

    Shared by every caller of one upstream provider, so the spacing holds across
    concurrent backfill days and resolver requests alike.
    """

    def __init__(
        self,
        rate_per_second: float = 5.0,
        timeout: float = 30.0,
        headers: dict | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        self._min_interval = 1.0 / rate_per_second
        self._next_slot = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={**DEFAULT_HEADERS, **(headers or {})},
            transport=transport,
        )

    async def _wait_for_slot(self) -> None:
        async with self._lock:
            delay = self._next_slot - time.monotonic()
            if delay > 0:
                logger.debug("Throttling request for %.3fs", delay)
                await asyncio.sleep(delay)
            self._next_slot = time.monotonic() + self._min_interval

    async def post(self, url: str, json: dict | list | None = None) -> httpx.Response:
        await self._wait_for_slot()
        return await self._client.post(url, json=json)

    async def close(self) -> None:
        await self._client.aclose()
