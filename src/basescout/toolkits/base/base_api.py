from __future__ import annotations

"""Base API Toolkit Helper Class
===============================

Common business logic for explorer toolkits, kept apart from HTTP transport
(ExplorerHTTPClient):

- Wiring of the shared cache, rate limiter and request pipeline from config
- Tool argument validation against pydantic input models
- Address validation
- Mapping of propagated errors onto standardized failure responses

Example:
    ```python
    class ExplorerToolkit(Toolkit, BaseAPIToolkit):
        def __init__(self, config=None, **kwargs):
            self._init_standard_configuration(config or load_config())
            super().__init__(name="explorer", tools=[self.get_balance], **kwargs)

        async def get_balance(self, address: str):
            try:
                params = self._validate_input("get_balance", AddressInput, address=address)
                account = await self._http_client.get_address(params.address)
                return self.response_builder.success_response(data=account)
            except Exception as e:
                return self._build_error_response("get_balance", e, endpoint="/v2/addresses/{address}")
    ```
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from basescout.cache import ResponseCache
from basescout.config import BasescoutConfig
from basescout.error_handler import ErrorHandler, get_error_handler
from basescout.exceptions import (
    RateExceeded,
    ToolInputError,
    TransportError,
    UpstreamHttpError,
    UpstreamShapeError,
)
from basescout.toolkits.utils.http_client import ExplorerHTTPClient
from basescout.toolkits.utils.rate_limiter import FixedWindowRateLimiter
from basescout.toolkits.utils.response_builder import ResponseBuilder
from basescout.toolkits.utils.retry import RetryPolicy

__all__ = ["BaseAPIToolkit"]

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseAPIToolkit:
    """Helper class for explorer API toolkits.

    Meant to be inherited alongside ``agno.tools.Toolkit``. Instance state is
    kept in underscore attributes so it never collides with Toolkit fields.
    """

    def _init_standard_configuration(
        self,
        config: BasescoutConfig,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        """Build the request pipeline and response helpers from configuration.

        Args:
            config: Validated configuration
            cache: Shared response cache (built from ``config.cache`` if omitted)
            rate_limiter: Shared limiter (built from ``config.rate_limit`` if omitted)
            transport: Optional httpx transport, used by tests to fake the explorer
            sleep: Backoff sleep, injectable for tests
            error_handler: Error handler (global one if omitted)
        """
        self._config = config

        if cache is None and config.cache.enabled:
            cache = ResponseCache(
                max_size=config.cache.max_size,
                ttl_seconds=config.cache.ttl_seconds,
            )
        self._response_cache = cache

        self._rate_limiter = rate_limiter or FixedWindowRateLimiter(
            points=config.rate_limit.points,
            duration_seconds=config.rate_limit.duration_seconds,
        )

        retry_policy = RetryPolicy(
            attempts=config.retry.attempts,
            min_delay_seconds=config.retry.min_delay_seconds,
            max_delay_seconds=config.retry.max_delay_seconds,
        )

        self._http_client = ExplorerHTTPClient(
            base_url=config.explorer.base_url,
            api_key=config.explorer.api_key,
            cache=self._response_cache,
            rate_limiter=self._rate_limiter,
            retry_policy=retry_policy,
            timeout=config.explorer.http_timeout,
            transport=transport,
            sleep=sleep,
        )

        self.response_builder = ResponseBuilder(self._get_toolkit_info())
        self._error_handler = error_handler or get_error_handler()

        logger.debug(
            f"Initialized standard configuration: network={config.explorer.network}, "
            f"cache={'on' if self._response_cache is not None else 'off'}, "
            f"rate={config.rate_limit.points}/{config.rate_limit.duration_seconds}s, "
            f"retries={retry_policy.attempts}"
        )

    def _get_toolkit_info(self) -> Dict[str, Any]:
        return {
            "toolkit_name": self.__class__.__name__,
            "toolkit_category": getattr(self, "_toolkit_category", "custom"),
            "toolkit_type": getattr(self, "_toolkit_type", "custom"),
        }

    def _validate_input(self, tool_name: str, model: Type[ModelT], **arguments: Any) -> ModelT:
        """Validate tool arguments, dropping those left at None.

        Raises:
            ToolInputError: If the arguments fail validation
        """
        provided = {key: value for key, value in arguments.items() if value is not None}
        try:
            return model.model_validate(provided)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ToolInputError(tool_name, errors) from e

    def _validate_address(self, address: str) -> str:
        """Validate an EVM address and return it stripped.

        Raises:
            ValueError: If a 0x-prefixed address is not valid hex
        """
        if not address or not isinstance(address, str):
            raise ValueError("Address must be a non-empty string")

        address = address.strip()
        if not address:
            raise ValueError("Address cannot be empty")

        if address.lower().startswith("0x") and len(address) == 42:
            try:
                int(address[2:], 16)
            except ValueError:
                raise ValueError(f"Invalid EVM address format: {address}")
            return address

        logger.warning(f"Address format not recognized, proceeding: {address}")
        return address

    def _build_error_response(
        self,
        tool_name: str,
        error: Exception,
        endpoint: str,
        **additional_fields: Any,
    ) -> Dict[str, Any]:
        """Log ``error`` through the error handler and turn it into a failure response."""
        handled = self._error_handler.handle_error(
            error,
            component=tool_name,
            context={"endpoint": endpoint},
            reraise=False,
        )

        if isinstance(error, ToolInputError):
            return self.response_builder.error_response(
                message=error.message,
                error_type="validation_error",
                details={"errors": error.errors},
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, ValidationError):
            # output records rejected the normalized upstream data
            return self.response_builder.api_error_response(
                api_endpoint=endpoint,
                api_message=str(error),
                error_type="upstream_shape_error",
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, ValueError):
            return self.response_builder.error_response(
                message=str(error),
                error_type="validation_error",
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, RateExceeded):
            return self.response_builder.error_response(
                message=error.message,
                error_type="rate_limited",
                details={"retry_after_seconds": error.retry_after_seconds},
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, UpstreamHttpError):
            return self.response_builder.api_error_response(
                api_endpoint=endpoint,
                http_status=error.status_code,
                api_message=error.response_text,
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, TransportError):
            return self.response_builder.api_error_response(
                api_endpoint=endpoint,
                api_message=str(error.cause),
                error_type="transport_error",
                tool=tool_name,
                **additional_fields,
            )
        if isinstance(error, UpstreamShapeError):
            return self.response_builder.api_error_response(
                api_endpoint=endpoint,
                api_message="; ".join(error.errors),
                error_type="upstream_shape_error",
                tool=tool_name,
                **additional_fields,
            )

        return self.response_builder.error_response(
            message=handled.message,
            error_type="internal_error",
            tool=tool_name,
            **additional_fields,
        )

    async def aclose(self) -> None:
        """Release the pipeline's HTTP resources."""
        client = getattr(self, "_http_client", None)
        if client is not None:
            await client.aclose()
