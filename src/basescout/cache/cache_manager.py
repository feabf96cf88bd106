"""
Response cache for basescout.

An in-memory LRU store with per-entry expiry that lets idempotent explorer
reads be answered without an upstream call or a rate-limit permit.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from loguru import logger


@dataclass(frozen=True)
class CacheEntry:
    """Represents a cached item with metadata."""
    key: str
    value: Any
    created_at: float
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class ResponseCache:
    """
    Bounded in-memory cache with TTL expiry and least-recently-used eviction.

    A ttl_seconds of 0 (or None) means entries never expire on their own and
    only leave the cache through eviction.
    """

    def __init__(self,
                 max_size: int = 500,
                 ttl_seconds: Optional[float] = 15.0,
                 clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds or None
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        expires_at = now + self.ttl_seconds if self.ttl_seconds else None

        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._evict_lru()

        self._entries[key] = CacheEntry(key=key, value=value, created_at=now, expires_at=expires_at)

    def delete(self, key: str) -> bool:
        if key in self._entries:
            del self._entries[key]
            return True
        return False

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[str]:
        """Keys of non-expired entries, least recently used first."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return list(self._entries.keys())

    def size(self) -> int:
        return len(self.keys())

    def _evict_lru(self) -> None:
        """Evict least recently used entry."""
        if not self._entries:
            return
        lru_key, _ = self._entries.popitem(last=False)
        logger.debug(f"Evicted least recently used cache entry: {lru_key}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "size": self.size(),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
        }


def stringify_query_value(value: Any) -> str:
    """Render a query value the way it is sent on the wire (booleans as true/false)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def create_cache_key(url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a deterministic cache key from a canonical URL and query parameters.

    Parameters with None values are dropped and the rest are sorted by name,
    so the key does not depend on insertion order.

    Example:
        >>> create_cache_key("https://x/api/v2/search", {"q": "usdc", "a": None})
        'https://x/api/v2/search?q=usdc'
    """
    if not params:
        return url

    pairs = sorted(
        (str(name), stringify_query_value(value))
        for name, value in params.items()
        if value is not None
    )
    query = urlencode(pairs)
    return f"{url}?{query}" if query else url
