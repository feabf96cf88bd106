"""
Shared fixtures and configuration for toolkit tests.
This file provides a fake explorer, clocks and ready-made toolkits so that no
test ever talks to a real Blockscout instance or sleeps.
"""
import json
from typing import Any, Callable, Dict, List, Union
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from basescout.config import BasescoutConfig
from basescout.error_handler import ErrorHandler
from basescout.toolkits.data.blockscout_toolkit import BlockscoutToolkit
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter


# ============================================================================
# SHARED MOCKS AND PATCHES
# ============================================================================

@pytest.fixture(autouse=True)
def mock_logger():
    """Auto-use fixture to mock logger across all toolkit tests."""
    with patch('basescout.toolkits.base.base_api.logger') as mock_base_log, \
         patch('basescout.toolkits.utils.http_client.logger') as mock_http_log, \
         patch('basescout.toolkits.utils.rate_limiter.logger') as mock_rate_log, \
         patch('basescout.toolkits.utils.retry.logger') as mock_retry_log, \
         patch('basescout.toolkits.data.router_activity.logger') as mock_scanner_log, \
         patch('basescout.toolkits.data.blockscout_toolkit.logger') as mock_toolkit_log, \
         patch('basescout.error_handler.logger') as mock_error_log:
        yield {
            'base': mock_base_log,
            'http': mock_http_log,
            'rate': mock_rate_log,
            'retry': mock_retry_log,
            'scanner': mock_scanner_log,
            'toolkit': mock_toolkit_log,
            'error': mock_error_log,
        }


@pytest.fixture
def instant_sleep():
    """Backoff sleep that returns immediately and records requested delays."""
    return AsyncMock(return_value=None)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


# ============================================================================
# FAKE EXPLORER
# ============================================================================

Reply = Union[Dict[str, Any], List[Any], tuple, Exception, Callable[[httpx.Request], httpx.Response]]


class ExplorerStub:
    """Routes requests to canned replies keyed by path below ``/api``.

    A reply is a JSON payload, a ``(status, body)`` tuple, an exception
    instance (raised as a transport failure) or a callable taking the request.
    Queued replies are consumed in order; the last one repeats.
    """

    def __init__(self):
        self.routes: Dict[str, List[Reply]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, *replies: Reply) -> "ExplorerStub":
        self.routes[path] = list(replies)
        return self

    def calls(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if self._route_of(request) == path]

    @staticmethod
    def _route_of(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get(self._route_of(request))
        if not queue:
            return httpx.Response(404, json={"message": "Not found"})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(reply, Exception):
            raise httpx.ConnectError(str(reply), request=request)
        if callable(reply):
            return reply(request)
        if isinstance(reply, tuple):
            status, body = reply
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, content=json.dumps(body).encode())
        return httpx.Response(200, json=reply)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def explorer():
    """Fresh fake explorer for each test."""
    return ExplorerStub()


# ============================================================================
# CONFIG AND TOOLKIT FIXTURES
# ============================================================================

@pytest.fixture
def test_config():
    """Configuration with short retries and no router overrides."""
    return BasescoutConfig.from_dict({
        "explorer": {"network": "base-mainnet"},
        "cache": {"enabled": True, "ttl_seconds": 15, "max_size": 100},
        "rate_limit": {"points": 100, "duration_seconds": 1},
        "retry": {"attempts": 2, "min_delay_seconds": 0.01, "max_delay_seconds": 0.02},
    })


@pytest.fixture
def make_toolkit(explorer, instant_sleep, test_config):
    """Factory building a BlockscoutToolkit wired to the fake explorer."""
    def _make(config: BasescoutConfig = None, **kwargs) -> BlockscoutToolkit:
        kwargs.setdefault("rate_limiter", FixedWindowRateLimiter(points=100, duration_seconds=1.0))
        toolkit = BlockscoutToolkit(
            config=config or test_config,
            transport=explorer.transport,
            sleep=instant_sleep,
            error_handler=ErrorHandler(),
            **kwargs,
        )
        return toolkit

    return _make


@pytest.fixture
def toolkit(make_toolkit):
    return make_toolkit()


# ============================================================================
# SAMPLE DATA
# ============================================================================

ACCOUNT = "0x" + "ab" * 20
TOKEN = "0x" + "cd" * 20
TX_HASH = "0x" + "ef" * 32


@pytest.fixture
def sample_addresses():
    return {"account": ACCOUNT, "token": TOKEN, "tx_hash": TX_HASH}
