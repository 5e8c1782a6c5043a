import json
import time

import httpx
import pytest

from priceoracle.infra.http.rate_limited_client import RateLimitedClient


def _echo_transport(seen: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler)


async def test_post_sends_json_with_default_headers():
    seen: list[httpx.Request] = []
    client = RateLimitedClient(rate_per_second=1000, transport=_echo_transport(seen), headers={"X-Test": "1"})
    try:
        res = await client.post("https://example.test/rpc", json={"method": "ping"})
    finally:
        await client.close()

    assert res.json() == {"ok": True}
    assert json.loads(seen[0].content) == {"method": "ping"}
    assert seen[0].headers["accept"] == "application/json"
    assert seen[0].headers["x-test"] == "1"


async def test_requests_are_spaced_by_rate():
    seen: list[httpx.Request] = []
    client = RateLimitedClient(rate_per_second=20, transport=_echo_transport(seen))
    try:
        started = time.monotonic()
        for _ in range(3):
            await client.post("https://example.test/rpc", json={})
        elapsed = time.monotonic() - started
    finally:
        await client.close()

    assert len(seen) == 3
    # Two gaps of 1/20s between three requests
    assert elapsed >= 0.09


def test_rate_must_be_positive():
    with pytest.raises(ValueError):
        RateLimitedClient(rate_per_second=0)
