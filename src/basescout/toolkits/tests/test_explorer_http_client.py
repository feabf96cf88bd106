"""
Tests for ExplorerHTTPClient: caching, rate limiting, retry classification
and upstream error mapping. The explorer is faked with httpx.MockTransport.
"""
import json
from unittest.mock import Mock

import httpx
import pytest

from basescout.cache import ResponseCache
from basescout.exceptions import RateExceeded, TransportError, UpstreamHttpError, UpstreamShapeError
from basescout.toolkits.utils.http_client import ExplorerHTTPClient
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter
from basescout.toolkits.utils.retry import RetryPolicy


API = "https://base.blockscout.com/api"
ADDRESS = "0x" + "ab" * 20


def _client(explorer, instant_sleep, **kwargs):
    kwargs.setdefault("retry_policy", RetryPolicy(attempts=3, min_delay_seconds=0.25, max_delay_seconds=1.5))
    return ExplorerHTTPClient(API, transport=explorer.transport, sleep=instant_sleep, **kwargs)


class TestHTTPClientBasics:
    """Request building and response validation."""

    def test_initialization(self):
        client = ExplorerHTTPClient(API + "/")

        assert client.base_url == API
        assert client._client is None

    @pytest.mark.asyncio
    async def test_successful_request(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", {"hash": ADDRESS, "coin_balance": "1"})

        async with _client(explorer, instant_sleep) as client:
            result = await client.get_address(ADDRESS)

        assert result == {"hash": ADDRESS, "coin_balance": "1"}
        request = explorer.requests[0]
        assert request.method == "GET"
        assert request.headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_address_is_lowercased_in_path(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}/counters", {"transactions_count": "3"})

        client = _client(explorer, instant_sleep)
        await client.get_address_counters(ADDRESS.upper().replace("0X", "0x"))
        await client.aclose()

        assert len(explorer.calls(f"/v2/addresses/{ADDRESS}/counters")) == 1

    @pytest.mark.asyncio
    async def test_none_query_values_are_dropped(self, explorer, instant_sleep):
        explorer.add("/v2/logs", {"items": []})

        client = _client(explorer, instant_sleep)
        await client.get_logs({"address": ADDRESS, "topics": None, "page": 2})
        await client.aclose()

        params = explorer.requests[0].url.params
        assert params["address"] == ADDRESS
        assert params["page"] == "2"
        assert "topics" not in params

    @pytest.mark.asyncio
    async def test_search_sends_query_term(self, explorer, instant_sleep):
        explorer.add("/v2/search", {"items": []})

        client = _client(explorer, instant_sleep)
        await client.search("usdc")
        await client.aclose()

        assert explorer.requests[0].url.params["q"] == "usdc"

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, explorer, instant_sleep):
        explorer.add("/v2/echo", {"ok": True})

        client = _client(explorer, instant_sleep)
        await client.request("/v2/echo", use_post=True, body={"a": 1}, cache=False)
        await client.aclose()

        request = explorer.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"a": 1}

    @pytest.mark.asyncio
    async def test_token_balances_accept_list(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}/token-balances", [{"value": "1"}])

        client = _client(explorer, instant_sleep)
        result = await client.get_address_token_balances(ADDRESS)
        await client.aclose()

        assert result == [{"value": "1"}]


class TestApiKey:

    @pytest.mark.asyncio
    async def test_api_key_is_sent_but_not_part_of_cache_key(self, explorer, instant_sleep):
        explorer.add(f"/v2/tokens/{ADDRESS}", {"symbol": "USDC"})
        cache = ResponseCache()

        client = _client(explorer, instant_sleep, api_key="secret", cache=cache)
        await client.get_token(ADDRESS)
        await client.aclose()

        assert explorer.requests[0].url.params["apikey"] == "secret"
        assert cache.keys() == [f"{API}/v2/tokens/{ADDRESS}"]

    @pytest.mark.asyncio
    async def test_no_api_key_param_without_key(self, explorer, instant_sleep):
        explorer.add(f"/v2/tokens/{ADDRESS}", {"symbol": "USDC"})

        client = _client(explorer, instant_sleep)
        await client.get_token(ADDRESS)
        await client.aclose()

        assert "apikey" not in explorer.requests[0].url.params


class TestCaching:

    @pytest.mark.asyncio
    async def test_cache_hit_skips_upstream_and_rate_limit(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", {"hash": ADDRESS})
        limiter = FixedWindowRateLimiter(points=5, duration_seconds=1.0)

        client = _client(explorer, instant_sleep, cache=ResponseCache(), rate_limiter=limiter)
        first = await client.get_address(ADDRESS)
        second = await client.get_address(ADDRESS)
        await client.aclose()

        assert first == second
        assert len(explorer.requests) == 1
        assert limiter.remaining() == 4

    @pytest.mark.asyncio
    async def test_expired_entry_goes_upstream_again(self, explorer, instant_sleep, fake_clock):
        explorer.add(f"/v2/tokens/{ADDRESS}", {"symbol": "OLD"}, {"symbol": "NEW"})
        limiter = FixedWindowRateLimiter(points=5, duration_seconds=60.0)
        cache = ResponseCache(ttl_seconds=15.0, clock=fake_clock)

        client = _client(explorer, instant_sleep, cache=cache, rate_limiter=limiter)
        assert await client.get_token(ADDRESS) == {"symbol": "OLD"}

        fake_clock.advance(14.9)
        assert await client.get_token(ADDRESS) == {"symbol": "OLD"}
        assert limiter.remaining() == 4

        fake_clock.advance(0.2)
        assert await client.get_token(ADDRESS) == {"symbol": "NEW"}
        await client.aclose()

        assert len(explorer.requests) == 2
        assert limiter.remaining() == 3

    @pytest.mark.asyncio
    async def test_query_order_shares_one_cache_entry(self, explorer, instant_sleep):
        explorer.add("/v2/search", {"items": [{"name": "USD Coin"}]})
        cache = ResponseCache()

        client = _client(explorer, instant_sleep, cache=cache)
        first = await client.request("/v2/search", query={"q": "usdc", "type": "token"})
        second = await client.request("/v2/search", query={"type": "token", "q": "usdc"})
        await client.aclose()

        assert first == second
        assert len(explorer.requests) == 1
        assert cache.size() == 1

    @pytest.mark.asyncio
    async def test_uncached_endpoints_always_hit_upstream(self, explorer, instant_sleep):
        explorer.add("/v2/transactions/0x01", {"hash": "0x01"})

        client = _client(explorer, instant_sleep, cache=ResponseCache())
        await client.get_transaction("0x01")
        await client.get_transaction("0x01")
        await client.aclose()

        assert len(explorer.requests) == 2

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, explorer, instant_sleep):
        explorer.add(f"/v2/tokens/{ADDRESS}", (400, "bad request"), {"symbol": "USDC"})
        cache = ResponseCache()

        client = _client(explorer, instant_sleep, cache=cache, retry_policy=RetryPolicy(attempts=1))
        with pytest.raises(UpstreamHttpError):
            await client.get_token(ADDRESS)
        assert cache.size() == 0

        assert await client.get_token(ADDRESS) == {"symbol": "USDC"}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_broken_cache_is_treated_as_miss(self, explorer, instant_sleep, mock_logger):
        explorer.add(f"/v2/tokens/{ADDRESS}", {"symbol": "USDC"})
        cache = ResponseCache()
        cache.get = Mock(side_effect=RuntimeError("cache down"))

        client = _client(explorer, instant_sleep, cache=cache)
        assert await client.get_token(ADDRESS) == {"symbol": "USDC"}
        await client.aclose()

        assert len(explorer.requests) == 1
        mock_logger['http'].warning.assert_called_once()


class TestRetryAndErrors:

    @pytest.mark.asyncio
    async def test_transport_failures_are_retried(self, explorer, instant_sleep):
        explorer.add(
            f"/v2/addresses/{ADDRESS}",
            ConnectionResetError("reset"),
            ConnectionResetError("reset"),
            {"hash": ADDRESS},
        )

        client = _client(explorer, instant_sleep)
        result = await client.get_address(ADDRESS)
        await client.aclose()

        assert result == {"hash": ADDRESS}
        assert len(explorer.requests) == 3
        assert [call.args[0] for call in instant_sleep.await_args_list] == [0.25, 0.5]

    @pytest.mark.asyncio
    async def test_transport_error_after_ceiling(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", ConnectionResetError("reset"))

        client = _client(explorer, instant_sleep)
        with pytest.raises(TransportError) as exc_info:
            await client.get_address(ADDRESS)
        await client.aclose()

        assert len(explorer.requests) == 3
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_server_error_maps_to_upstream_http_error(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", (500, "internal error"))

        client = _client(explorer, instant_sleep)
        with pytest.raises(UpstreamHttpError) as exc_info:
            await client.get_address(ADDRESS)
        await client.aclose()

        assert exc_info.value.status_code == 500
        assert exc_info.value.response_text == "internal error"
        assert len(explorer.requests) == 3

    @pytest.mark.asyncio
    async def test_shape_error_is_not_retried(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", ["not", "an", "object"])

        client = _client(explorer, instant_sleep)
        with pytest.raises(UpstreamShapeError):
            await client.get_address(ADDRESS)
        await client.aclose()

        assert len(explorer.requests) == 1
        instant_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_json_is_a_shape_error(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", (200, "<html>maintenance</html>"))

        client = _client(explorer, instant_sleep)
        with pytest.raises(UpstreamShapeError) as exc_info:
            await client.get_address(ADDRESS)
        await client.aclose()

        assert "Invalid JSON" in exc_info.value.errors[0]
        assert len(explorer.requests) == 1

    @pytest.mark.asyncio
    async def test_rate_exceeded_is_not_retried(self, explorer, instant_sleep):
        explorer.add("/v2/transactions/0x01", {"hash": "0x01"})
        limiter = FixedWindowRateLimiter(points=1, duration_seconds=60.0)

        client = _client(explorer, instant_sleep, rate_limiter=limiter)
        await client.get_transaction("0x01")
        with pytest.raises(RateExceeded):
            await client.get_transaction("0x01")
        await client.aclose()

        assert len(explorer.requests) == 1
        instant_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_each_attempt_takes_a_permit(self, explorer, instant_sleep):
        explorer.add(f"/v2/addresses/{ADDRESS}", ConnectionResetError("reset"), {"hash": ADDRESS})
        limiter = FixedWindowRateLimiter(points=10, duration_seconds=60.0)

        client = _client(explorer, instant_sleep, rate_limiter=limiter)
        await client.get_address(ADDRESS)
        await client.aclose()

        assert limiter.remaining() == 8

    @pytest.mark.asyncio
    async def test_final_failure_is_logged(self, explorer, instant_sleep, mock_logger):
        explorer.add(f"/v2/addresses/{ADDRESS}", (503, "unavailable"))

        client = _client(explorer, instant_sleep, retry_policy=RetryPolicy(attempts=1))
        with pytest.raises(UpstreamHttpError):
            await client.get_address(ADDRESS)
        await client.aclose()

        mock_logger['http'].error.assert_called_once()
