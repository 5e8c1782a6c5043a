"""Alchemy price source — token creation dates and daily historical USD prices."""

import logging
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from priceoracle.domain.enums import Network
from priceoracle.exceptions import ExternalServiceError, NoDataError, RateLimitedError
from priceoracle.infra.http.rate_limited_client import RateLimitedClient
from priceoracle.infra.price.base import PriceSourceClient

logger = logging.getLogger(__name__)

# Network -> Alchemy network slug
ALCHEMY_NETWORKS: dict[str, str] = {
    Network.ETHEREUM.value: "eth-mainnet",
    Network.POLYGON.value: "polygon-mainnet",
}

PRICES_URL = "https://api.g.alchemy.com/prices/v1/{api_key}/tokens/historical"
RPC_URL = "https://{network}.g.alchemy.com/v2/{api_key}"

MAX_RETRIES = 3


class AlchemyPriceSource(PriceSourceClient):
    """Live price source with a bounded retry loop.

    Each failed attempt waits `backoff * 2**(attempt - 1)` seconds; a 429 adds a fixed
    `rate_limit_wait` on top of that.
    """

    def __init__(
        self,
        http_client: RateLimitedClient,
        api_key: str = "",
        max_retries: int = MAX_RETRIES,
        backoff: float = 1.0,
        rate_limit_wait: float = 2.0,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._max_retries = max_retries
        self._backoff = backoff
        self._rate_limit_wait = rate_limit_wait

    def _retry_delay(self, retry_state: RetryCallState) -> float:
        delay = self._backoff * 2 ** (retry_state.attempt_number - 1)
        if retry_state.outcome is not None and isinstance(retry_state.outcome.exception(), RateLimitedError):
            delay += self._rate_limit_wait
        return delay

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(ExternalServiceError),
            stop=stop_after_attempt(self._max_retries),
            wait=self._retry_delay,
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome is not None else None
        logger.info("Alchemy attempt %d failed: %s", retry_state.attempt_number, exc)

    async def get_creation_date(self, token: str, network: str) -> datetime:
        """Block time of the token's first ERC-20 transfer.

        Raises NoDataError when the token has no transfer history, ExternalServiceError
        once retries are exhausted.
        """
        url = RPC_URL.format(network=_alchemy_network(network), api_key=self._api_key)
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "alchemy_getAssetTransfers",
            "params": [
                {
                    "fromBlock": "0x0",
                    "contractAddresses": [token],
                    "category": ["erc20"],
                    "order": "asc",
                    "maxCount": "0x1",
                    "withMetadata": True,
                    "excludeZeroValue": False,
                }
            ],
        }
        async for attempt in self._retrying():
            with attempt:
                data = await self._post(url, payload)
                if "error" in data:
                    raise ExternalServiceError(f"Alchemy RPC error: {data['error'].get('message', data['error'])}")
                transfers = (data.get("result") or {}).get("transfers") or []
                if not transfers:
                    raise NoDataError(f"No transfers found for token {token} on {network}")
                block_timestamp = (transfers[0].get("metadata") or {}).get("blockTimestamp")
                try:
                    return datetime.fromisoformat(block_timestamp).astimezone(UTC)
                except (TypeError, ValueError) as e:
                    raise ExternalServiceError(f"Malformed block timestamp: {block_timestamp!r}") from e
        raise ExternalServiceError("unreachable")  # pragma: no cover

    async def get_spot_price(self, token: str, network: str, day: date) -> Decimal | None:
        """Daily USD price for `day`, or None when the provider has no data for it."""
        start = datetime.combine(day, time.min, tzinfo=UTC)
        payload = {
            "network": _alchemy_network(network),
            "address": token,
            "startTime": start.isoformat().replace("+00:00", "Z"),
            "endTime": (start + timedelta(days=1)).isoformat().replace("+00:00", "Z"),
            "interval": "1d",
        }
        url = PRICES_URL.format(api_key=self._api_key)
        async for attempt in self._retrying():
            with attempt:
                data = await self._post(url, payload)
                points = data.get("data") or []
                if not points:
                    return None
                try:
                    return Decimal(str(points[0]["value"]))
                except (KeyError, InvalidOperation) as e:
                    raise ExternalServiceError(f"Malformed price point: {points[0]!r}") from e
        raise ExternalServiceError("unreachable")  # pragma: no cover

    async def _post(self, url: str, payload: dict) -> dict:
        try:
            response = await self._http.post(url, json=payload)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Alchemy request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError("Alchemy rate limit (429)")
        if response.status_code == 404:
            return {}
        if response.status_code != 200:
            raise ExternalServiceError(f"Alchemy returned {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError("Alchemy returned a non-JSON body") from e


def _alchemy_network(network: str) -> str:
    try:
        return ALCHEMY_NETWORKS[network]
    except KeyError:
        raise ValueError(f"Unsupported network: {network}") from None
