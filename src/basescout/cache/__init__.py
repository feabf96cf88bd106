from .cache_manager import CacheEntry, ResponseCache, create_cache_key, stringify_query_value

__all__ = [
    "CacheEntry",
    "ResponseCache",
    "create_cache_key",
    "stringify_query_value",
]
