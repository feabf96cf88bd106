"""Router activity scanner
=======================

Collects recent transactions sent *to* a DEX router by walking the explorer's
keyset cursor until enough items are buffered for the requested page, the
listing is exhausted, or (with a time window) a batch reaches past the
cutoff. Items are then normalized, filtered by the window and sliced.

Batches are assumed to arrive newest-first: the scan stops as soon as the
last item of a batch is older than the cutoff.
"""

import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from basescout.toolkits.data.models import ActivityItem, DecodedCall, RouterActivityPage
from basescout.toolkits.utils.conversions import normalize_timestamp_ms
from basescout.toolkits.utils.field_resolver import (
    FieldResolver,
    any_field,
    list_field,
    mapping_field,
    nested,
    string_field,
)
from basescout.toolkits.utils.http_client import ExplorerHTTPClient
from basescout.toolkits.utils.pagination import Cursor, extract_next_cursor

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "RouterActivityScanner",
    "normalize_activity_item",
    "activity_timestamp_ms",
]

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_BATCH = FieldResolver(list_field("items"), list_field("result"), default=[])

_DECODED_SOURCE = FieldResolver(
    mapping_field("decoded_input"),
    mapping_field("decoded"),
    mapping_field("method_details"),
)
_DECODED_NAME = FieldResolver(string_field("name"), string_field("method_call"), string_field("method"))
_DECODED_SIGNATURE = FieldResolver(string_field("signature"), string_field("method_id"), string_field("selector"))
_DECODED_PARAMS = FieldResolver(list_field("params"), list_field("parameters"), list_field("arguments"))

_HASH = FieldResolver(any_field("hash"), any_field("tx_hash"), default="")
_FROM = FieldResolver(string_field("from"), nested("from", "hash"), string_field("sender"))
_METHOD = FieldResolver(string_field("method"), string_field("input_method"))
_TIMESTAMP = FieldResolver(any_field("timestamp"), any_field("block_timestamp"))
_VALUE = FieldResolver(string_field("value"), string_field("amount"))


def _wall_clock_ms() -> float:
    return time.time() * 1000


def activity_timestamp_ms(record: Any) -> Optional[float]:
    """Epoch milliseconds of a raw transaction entry, or None."""
    return normalize_timestamp_ms(_TIMESTAMP(record))


def _decode_call(record: Mapping[str, Any]) -> Optional[DecodedCall]:
    source = _DECODED_SOURCE(record)
    if source is None:
        return None

    params = _DECODED_PARAMS(source)
    if params is not None:
        params = [param for param in params if isinstance(param, Mapping)]

    return DecodedCall(
        name=_DECODED_NAME(source),
        signature=_DECODED_SIGNATURE(source),
        params=params,
    )


def normalize_activity_item(record: Mapping[str, Any]) -> ActivityItem:
    """Map one raw explorer transaction onto an ActivityItem."""
    decoded = _decode_call(record)
    method = _METHOD(record)
    if method is None and decoded is not None:
        method = decoded.name

    return ActivityItem(
        hash=str(_HASH(record)),
        from_=_FROM(record),
        method=method,
        decoded=decoded,
        timestamp=activity_timestamp_ms(record),
        value=_VALUE(record),
    )


class RouterActivityScanner:
    """Multi-page scan of transactions addressed to a router.

    Example:
        ```python
        scanner = RouterActivityScanner(client)
        page = await scanner.scan("0xE592...", since_minutes=60, page=1, page_size=20)
        ```
    """

    def __init__(self, client: ExplorerHTTPClient, now_ms: Callable[[], float] = _wall_clock_ms):
        self._client = client
        self._now_ms = now_ms

    async def _collect(self, router: str, target_count: int, cutoff_ms: Optional[float]) -> List[Any]:
        collected: List[Any] = []
        cursor: Optional[Cursor] = None
        exhausted = False
        pages_fetched = 0

        while not exhausted and len(collected) < target_count:
            query: Dict[str, Any] = {"filter": "to", **(cursor or {})}
            response = await self._client.get_address_transactions(router, query)
            pages_fetched += 1

            batch = _BATCH(response)
            collected.extend(batch)

            next_cursor = extract_next_cursor(response)
            if next_cursor is None:
                exhausted = True
            elif next_cursor == cursor:
                logger.warning(f"Explorer repeated cursor {cursor} for router {router}, stopping scan")
                exhausted = True
            else:
                cursor = next_cursor

            if cutoff_ms is None or not batch:
                continue

            last_timestamp = activity_timestamp_ms(batch[-1])
            if last_timestamp and last_timestamp < cutoff_ms:
                exhausted = True

        logger.debug(
            f"Router scan for {router}: {len(collected)} raw item(s) over {pages_fetched} page(s)"
        )
        return collected

    async def scan(
        self,
        router: str,
        since_minutes: Optional[int] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> RouterActivityPage:
        """Return one page of normalized router activity in upstream order.

        Args:
            router: Router contract address
            since_minutes: Only keep items newer than this many minutes
            page: 1-based page number
            page_size: Items per page (1-100)

        Raises:
            ValueError: If page or page_size is out of range
            UpstreamError: Propagated unchanged from the request pipeline
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")

        cutoff_ms = None
        if since_minutes is not None:
            cutoff_ms = self._now_ms() - since_minutes * 60 * 1000

        collected = await self._collect(router, page * page_size, cutoff_ms)

        items: List[ActivityItem] = []
        for entry in collected:
            if not isinstance(entry, Mapping):
                continue
            item = normalize_activity_item(entry)
            if cutoff_ms is not None and (not item.timestamp or item.timestamp < cutoff_ms):
                continue
            items.append(item)

        start = (page - 1) * page_size
        return RouterActivityPage(
            router=router,
            page=page,
            page_size=page_size,
            since_minutes=since_minutes,
            items=items[start:start + page_size],
        )
