"""In-process cache engines: a size-bounded LRU cache and a pooled object cache."""

from .entry import ZERO_TIME, Finalizer, SizedValue
from .lru import CacheStats, Item, LRUCache, stats_json
from .pool import DEFAULT_CLEANUP_INTERVAL, DEFAULT_EXPIRATION, PoolCache

__all__ = [
    "CacheStats",
    "DEFAULT_CLEANUP_INTERVAL",
    "DEFAULT_EXPIRATION",
    "Finalizer",
    "Item",
    "LRUCache",
    "PoolCache",
    "SizedValue",
    "ZERO_TIME",
    "stats_json",
]
