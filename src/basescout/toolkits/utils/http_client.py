from __future__ import annotations

"""Explorer HTTP Client
=====================

The single path every outbound call to the Blockscout REST API takes.

Request pipeline:
1. Build the URL and query (None values dropped, API key appended last)
2. Serve from the response cache when a fresh entry exists
3. Take a rate-limit permit (``RateExceeded`` aborts the call)
4. Issue the request and map failures onto the upstream error types
5. Validate the JSON body against a pydantic ``TypeAdapter``
6. Retry steps 3-5 with exponential backoff on transport and HTTP errors
7. Store the validated value in the cache

Example:
    ```python
    async with ExplorerHTTPClient("https://base.blockscout.com/api",
                                  cache=ResponseCache(),
                                  rate_limiter=FixedWindowRateLimiter()) as client:
        account = await client.get_address("0xabc...")
    ```
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from basescout.cache import ResponseCache, create_cache_key, stringify_query_value
from basescout.exceptions import (
    TransportError,
    UpstreamError,
    UpstreamHttpError,
    UpstreamShapeError,
)
from basescout.toolkits.utils.conversions import checksum_address
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter
from basescout.toolkits.utils.retry import RetryPolicy, attempt

__all__ = ["ExplorerHTTPClient", "JSON_OBJECT", "JSON_OBJECT_OR_LIST"]

JSON_OBJECT: TypeAdapter[Dict[str, Any]] = TypeAdapter(Dict[str, Any])
JSON_OBJECT_OR_LIST: TypeAdapter[Union[Dict[str, Any], List[Any]]] = TypeAdapter(
    Union[Dict[str, Any], List[Any]]
)

_DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _is_retryable(error: Exception) -> bool:
    return isinstance(error, (TransportError, UpstreamHttpError))


class ExplorerHTTPClient:
    """Async client for a Blockscout ``/api`` root.

    Cache and rate limiter are injected so callers decide what is shared.
    Passing ``cache=None`` disables caching; ``rate_limiter=None`` disables
    the quota.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._cache = cache
        self._rate_limiter = rate_limiter
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

        logger.debug(
            f"Initialized ExplorerHTTPClient for {self._base_url} "
            f"(cache={'on' if cache is not None else 'off'}, "
            f"attempts={self._retry_policy.attempts})"
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            client_kwargs: Dict[str, Any] = {
                "headers": _DEFAULT_HEADERS,
                "follow_redirects": True,
            }
            if self._timeout is not None:
                client_kwargs["timeout"] = self._timeout
            if self._transport is not None:
                client_kwargs["transport"] = self._transport

            self._client = httpx.AsyncClient(**client_kwargs)
            logger.debug(f"Created HTTP client for {self._base_url}")
        return self._client

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    @staticmethod
    def _clean_query(query: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        if not query:
            return {}
        return {
            str(key): stringify_query_value(value)
            for key, value in query.items()
            if value is not None
        }

    def _lookup_cache(self, cache_key: str, schema: TypeAdapter) -> Optional[Any]:
        try:
            cached = self._cache.get(cache_key)
            if cached is None:
                return None
            return schema.validate_python(cached)
        except Exception as e:
            logger.warning(f"Cache lookup failed for {cache_key}, treating as miss: {e}")
            return None

    async def request(
        self,
        path: str,
        schema: TypeAdapter = JSON_OBJECT,
        *,
        query: Optional[Mapping[str, Any]] = None,
        use_post: bool = False,
        body: Optional[Mapping[str, Any]] = None,
        cache: bool = True,
    ) -> Any:
        """Fetch ``path`` through the pipeline and return the validated payload.

        Args:
            path: Path relative to the API root, e.g. ``/v2/addresses/0x...``
            schema: TypeAdapter the JSON body must satisfy
            query: Query parameters; None values are dropped
            use_post: Send a POST with ``body`` as JSON instead of a GET
            body: JSON body for POST requests
            cache: Whether this call may be served from and stored in the cache

        Raises:
            RateExceeded: Outbound quota exhausted (not retried)
            TransportError: Network failure after all attempts
            UpstreamHttpError: Non-2xx response after all attempts
            UpstreamShapeError: Body is not JSON or fails ``schema`` (not retried)
        """
        url = self._build_url(path)
        params = self._clean_query(query)
        cache_key = create_cache_key(url, params)

        request_params = dict(params)
        if self._api_key:
            request_params["apikey"] = self._api_key

        use_cache = cache and self._cache is not None
        if use_cache:
            cached = self._lookup_cache(cache_key, schema)
            if cached is not None:
                logger.debug(f"Cache hit: {cache_key}")
                return cached
            logger.debug(f"Cache miss: {cache_key}")

        method = "POST" if use_post else "GET"

        async def execute() -> Any:
            if self._rate_limiter is not None:
                self._rate_limiter.consume()
            return await self._send(method, url, request_params, body if use_post else None, schema)

        try:
            result = await attempt(
                execute,
                self._retry_policy,
                is_retryable=_is_retryable,
                sleep=self._sleep,
                description=f"{method} {path}",
            )
        except UpstreamError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise

        if use_cache:
            self._cache.set(cache_key, result)

        return result

    async def _send(
        self,
        method: str,
        url: str,
        params: Dict[str, str],
        body: Optional[Mapping[str, Any]],
        schema: TypeAdapter,
    ) -> Any:
        client = self._get_client()

        try:
            response = await client.request(
                method,
                url,
                params=params or None,
                json=dict(body or {}) if method == "POST" else None,
            )
        except httpx.RequestError as e:
            raise TransportError(url, e) from e

        if not response.is_success:
            raise UpstreamHttpError(url, response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamShapeError(url, [f"Invalid JSON response: {e}"], cause=e) from e

        try:
            return schema.validate_python(payload)
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()]
            raise UpstreamShapeError(url, errors, cause=e) from e

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def get_address(self, address: str) -> Dict[str, Any]:
        return await self.request(f"/v2/addresses/{checksum_address(address)}", JSON_OBJECT)

    async def get_address_token_balances(
        self, address: str, query: Optional[Mapping[str, Any]] = None
    ) -> Union[Dict[str, Any], List[Any]]:
        return await self.request(
            f"/v2/addresses/{checksum_address(address)}/token-balances",
            JSON_OBJECT_OR_LIST,
            query=query,
        )

    async def get_address_counters(self, address: str) -> Dict[str, Any]:
        return await self.request(f"/v2/addresses/{checksum_address(address)}/counters", JSON_OBJECT)

    async def get_address_transactions(
        self, address: str, query: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.request(
            f"/v2/addresses/{checksum_address(address)}/transactions",
            JSON_OBJECT,
            query=query,
            cache=False,
        )

    async def get_address_token_transfers(
        self, address: str, query: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.request(
            f"/v2/addresses/{checksum_address(address)}/token-transfers",
            JSON_OBJECT,
            query=query,
            cache=False,
        )

    async def get_token_transfers(
        self, address: str, query: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.request(
            f"/v2/tokens/{checksum_address(address)}/transfers",
            JSON_OBJECT,
            query=query,
            cache=False,
        )

    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        return await self.request(f"/v2/transactions/{tx_hash}", JSON_OBJECT, cache=False)

    async def get_transaction_logs(self, tx_hash: str) -> Dict[str, Any]:
        return await self.request(f"/v2/transactions/{tx_hash}/logs", JSON_OBJECT, cache=False)

    async def get_logs(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.request("/v2/logs", JSON_OBJECT, query=query, cache=False)

    async def get_smart_contract(self, address: str) -> Dict[str, Any]:
        return await self.request(f"/v2/smart-contracts/{checksum_address(address)}", JSON_OBJECT)

    async def get_token(self, address: str) -> Dict[str, Any]:
        return await self.request(f"/v2/tokens/{checksum_address(address)}", JSON_OBJECT)

    async def search(self, term: str) -> Dict[str, Any]:
        return await self.request("/v2/search", JSON_OBJECT, query={"q": term})

    # =========================================================================
    # Resource management
    # =========================================================================

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug(f"Closed ExplorerHTTPClient for {self._base_url}")

    async def __aenter__(self) -> "ExplorerHTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
