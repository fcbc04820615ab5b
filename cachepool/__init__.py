"""
cachepool Python package.

Two thread-safe in-process caches: a size-bounded LRU cache and a pooled
object cache with background expiration. See README.md for usage.
"""

from .__version__ import __version__
from .cache import (
    ZERO_TIME,
    CacheStats,
    Finalizer,
    Item,
    LRUCache,
    PoolCache,
    SizedValue,
    stats_json,
)
from .observability import setup_logging
from .utils.cache import memoize

__all__ = [
    "__version__",
    "CacheStats",
    "Finalizer",
    "Item",
    "LRUCache",
    "PoolCache",
    "SizedValue",
    "ZERO_TIME",
    "memoize",
    "setup_logging",
    "stats_json",
]
