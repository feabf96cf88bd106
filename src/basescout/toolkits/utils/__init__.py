"""
Utility modules for basescout toolkits.

- ExplorerHTTPClient: request pipeline (cache, rate limit, retry, validation)
- FixedWindowRateLimiter: outbound request quota
- RetryPolicy / attempt: exponential backoff helper
- FieldResolver: ordered-accessor field normalization
- ResponseBuilder: consistent tool response formatting
"""

from .rate_limiter import FixedWindowRateLimiter
from .retry import RetryPolicy, attempt
from .conversions import (
    checksum_address,
    format_wei_to_ether,
    normalize_status,
    normalize_timestamp_ms,
    normalize_timestamp_seconds,
    parse_number,
)
from .field_resolver import (
    FieldResolver,
    any_field,
    list_field,
    mapping_field,
    nested,
    number_field,
    string_field,
)
from .pagination import clean_cursor, extract_next_cursor, extract_next_page
from .response_builder import ResponseBuilder
from .http_client import ExplorerHTTPClient, JSON_OBJECT, JSON_OBJECT_OR_LIST

__all__ = [
    'FixedWindowRateLimiter',
    'RetryPolicy',
    'attempt',
    'checksum_address',
    'format_wei_to_ether',
    'normalize_status',
    'normalize_timestamp_ms',
    'normalize_timestamp_seconds',
    'parse_number',
    'FieldResolver',
    'any_field',
    'list_field',
    'mapping_field',
    'nested',
    'number_field',
    'string_field',
    'clean_cursor',
    'extract_next_cursor',
    'extract_next_page',
    'ResponseBuilder',
    'ExplorerHTTPClient',
    'JSON_OBJECT',
    'JSON_OBJECT_OR_LIST',
]
