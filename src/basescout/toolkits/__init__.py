"""
basescout toolkits

Architecture:
- base/: BaseAPIToolkit helper (pipeline wiring, validation, error responses)
- utils/: request pipeline, rate limiter, retry, field resolution, conversions
- data/: BlockscoutToolkit, router registry and router activity scanner
- tests/: toolkit test suite

Usage:
    from basescout.toolkits import BlockscoutToolkit

    toolkit = BlockscoutToolkit()
    summary = await toolkit.get_account_summary("0x...")
"""

from .base import BaseAPIToolkit

from .utils import (
    ExplorerHTTPClient,
    FieldResolver,
    FixedWindowRateLimiter,
    ResponseBuilder,
    RetryPolicy,
)

from .data import (
    BlockscoutToolkit,
    RouterActivityScanner,
)

__all__ = [
    "BaseAPIToolkit",
    "ExplorerHTTPClient",
    "FieldResolver",
    "FixedWindowRateLimiter",
    "ResponseBuilder",
    "RetryPolicy",
    "BlockscoutToolkit",
    "RouterActivityScanner",
]
