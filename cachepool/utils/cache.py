"""Function memoization backed by :class:`~cachepool.cache.lru.LRUCache`.

This module plugs the LRU cache into :func:`cachetools.cached`, so callers get
the familiar decorator while results are accounted by size and evicted by
recency like any other LRU entry.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, Callable, Optional, TypeVar

from cachetools import cached  # type: ignore[import-untyped]
from cachetools.keys import hashkey  # type: ignore[import-untyped]

from ..cache.entry import value_size
from ..cache.lru import LRUCache

F = TypeVar("F", bound=Callable[..., Any])


def result_size(value: Any) -> int:
    """Cost of a memoized result: its own ``size()`` or 1."""
    return value_size(value, 0) or 1


class _SizedMapping:
    """Mapping view that stores through :meth:`LRUCache.set` with a size."""

    def __init__(self, cache: LRUCache, getsizeof: Callable[[Any], int]) -> None:
        self.cache = cache
        self._getsizeof = getsizeof

    def __getitem__(self, key: Hashable) -> Any:
        return self.cache[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.cache.set(key, value, self._getsizeof(value))

    def setdefault(self, key: Hashable, value: Any) -> Any:
        self.cache.set_if_absent(key, value, self._getsizeof(value))
        current, found = self.cache.get(key)
        return current if found else value

    def clear(self) -> None:
        self.cache.clear()


def memoize(
    cache: Optional[LRUCache] = None,
    *,
    capacity: int = 1024,
    key: Callable[..., Hashable] = hashkey,
    getsizeof: Callable[[Any], int] = result_size,
) -> Callable[[F], F]:
    """Decorate a function so its results are kept in an LRU cache.

    Parameters
    ----------
    cache: LRUCache, optional
        Cache to store results in. A new one with ``capacity`` is created
        when omitted.
    capacity: int
        Capacity of the cache created when ``cache`` is None.
    key: Callable
        Builds the cache key from the call arguments.
    getsizeof: Callable
        Cost of one result. Defaults to the result's ``size()`` or 1, so an
        unsized result counts as one unit of capacity.

    Example
    -------
    >>> @memoize(capacity=2)
    ... def square(x):
    ...     return x * x
    >>> square(3)
    9
    >>> square.lru.keys()
    [(3,)]
    """
    if cache is None:
        cache = LRUCache(capacity)
    mapping = _SizedMapping(cache, getsizeof)

    def decorator(func: F) -> F:
        wrapper = cached(mapping, key=key)(func)
        wrapper.lru = cache  # type: ignore[attr-defined]
        return wrapper  # type: ignore[no-any-return]

    return decorator
