"""Capacity-bounded LRU cache with approximate cost accounting.

Every entry carries a size in caller-chosen cost units (bytes, rows, ...).
The cache tracks the aggregate size and, after any mutation that grows it,
drops least-recently-used entries until the aggregate fits the capacity
again. Evicted values are simply released: no callback is invoked.

The index is an :class:`collections.OrderedDict` kept in most-recently-used
first order, which gives O(1) lookup, promotion and tail eviction.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .entry import ZERO_TIME, LRUEntry, value_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Item:
    """Snapshot of one cached entry as returned by :meth:`LRUCache.items`."""

    key: Hashable
    value: Any
    size: int


class CacheStats(BaseModel):
    """Point-in-time counters of an :class:`LRUCache`.

    Attributes
    ----------
    length: int
        Number of entries.
    size: int
        Aggregate size of all entries.
    capacity: int
        Configured bound on ``size``.
    oldest_access: datetime
        Last access time of the least-recently-used entry, or
        :data:`~cachepool.cache.entry.ZERO_TIME` when the cache is empty.
    """

    model_config = ConfigDict(frozen=True)

    length: int = Field(0, ge=0, serialization_alias="Length")
    size: int = Field(0, ge=0, serialization_alias="Size")
    capacity: int = Field(0, ge=0, serialization_alias="Capacity")
    oldest_access: datetime = Field(ZERO_TIME, serialization_alias="OldestAccess")

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True))


class LRUCache:
    """Thread-safe least-recently-used cache bounded by aggregate size.

    Parameters
    ----------
    capacity: int
        Upper bound on the sum of entry sizes. A capacity of 0 evicts every
        entry with a non-zero size as soon as it is inserted.
    """

    def __init__(self, capacity: int) -> None:
        self._lock = threading.Lock()
        self._table: "OrderedDict[Hashable, LRUEntry]" = OrderedDict()
        self._size = 0
        self._capacity = _check_capacity(capacity)

    @classmethod
    def from_config(cls, config) -> "LRUCache":
        """Build a cache from a :class:`~cachepool.config.models.LRUCacheConfig`."""
        return cls(config.capacity)

    def get(self, key: Hashable) -> Tuple[Any, bool]:
        """Return ``(value, True)`` and promote the entry, or ``(None, False)``."""
        with self._lock:
            entry = self._table.get(key)
            if entry is None:
                return None, False
            self._promote(entry)
            return entry.value, True

    def set(self, key: Hashable, value: Any, size: int = 0) -> None:
        """Insert or replace ``key``.

        A ``size`` of 0 or less is taken from the value's own ``size()``
        method, or 0 if it has none.
        """
        with self._lock:
            size = value_size(value, size)
            entry = self._table.get(key)
            if entry is not None:
                self._update_inplace(entry, value, size)
            else:
                self._add_new(key, value, size)

    def set_if_absent(self, key: Hashable, value: Any, size: int = 0) -> None:
        """Insert ``key`` unless present; an existing entry is only promoted."""
        with self._lock:
            entry = self._table.get(key)
            if entry is not None:
                self._promote(entry)
            else:
                self._add_new(key, value, value_size(value, size))

    def take(self, key: Hashable) -> Tuple[Any, bool]:
        """Remove ``key`` and return ``(value, True)``, or ``(None, False)``."""
        with self._lock:
            entry = self._table.pop(key, None)
            if entry is None:
                return None, False
            self._size -= entry.size
            return entry.value, True

    def delete(self, key: Hashable) -> bool:
        """Remove ``key``; return whether it was present."""
        with self._lock:
            entry = self._table.pop(key, None)
            if entry is None:
                return False
            self._size -= entry.size
            return True

    def clear(self) -> None:
        with self._lock:
            self._table.clear()
            self._size = 0

    def set_capacity(self, capacity: int) -> None:
        """Change the bound and evict immediately until it holds."""
        with self._lock:
            self._capacity = _check_capacity(capacity)
            self._check_capacity()

    @property
    def capacity(self) -> int:
        return self._capacity

    def stats(self) -> CacheStats:
        with self._lock:
            oldest = ZERO_TIME
            if self._table:
                oldest = self._table[next(reversed(self._table))].accessed
            return CacheStats(
                length=len(self._table),
                size=self._size,
                capacity=self._capacity,
                oldest_access=oldest,
            )

    def stats_json(self) -> str:
        """Render :meth:`stats` as ``{"Length": .., "Size": .., ...}``."""
        return self.stats().to_json()

    def keys(self) -> List[Hashable]:
        """Snapshot of keys, most recently used first."""
        with self._lock:
            return list(self._table)

    def items(self) -> List[Item]:
        """Snapshot of entries, most recently used first."""
        with self._lock:
            return [Item(e.key, e.value, e.size) for e in self._table.values()]

    # Mapping protocol, so the cache can back ``cachetools.cached``.

    def __getitem__(self, key: Hashable) -> Any:
        value, found = self.get(key)
        if not found:
            raise KeyError(key)
        return value

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Hashable) -> None:
        if not self.delete(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._table

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(length={len(self)}, size={self._size}, "
            f"capacity={self._capacity})"
        )

    # Helpers below expect the lock to be held.

    def _promote(self, entry: LRUEntry) -> None:
        self._table.move_to_end(entry.key, last=False)
        entry.touch()

    def _update_inplace(self, entry: LRUEntry, value: Any, size: int) -> None:
        self._size += size - entry.size
        entry.value = value
        entry.size = size
        self._promote(entry)
        self._check_capacity()

    def _add_new(self, key: Hashable, value: Any, size: int) -> None:
        self._table[key] = LRUEntry(key=key, value=value, size=size)
        self._table.move_to_end(key, last=False)
        self._size += size
        self._check_capacity()

    def _check_capacity(self) -> None:
        while self._size > self._capacity and self._table:
            key, entry = self._table.popitem(last=True)
            self._size -= entry.size
            logger.debug(
                "lru_cache.evicted",
                extra={
                    "key": repr(key),
                    "entry_size": entry.size,
                    "cache_size": self._size,
                    "capacity": self._capacity,
                },
            )


def stats_json(cache: Optional[LRUCache]) -> str:
    """Stats of ``cache`` as JSON; ``"{}"`` when there is no cache."""
    if cache is None:
        return "{}"
    return cache.stats_json()


def _check_capacity(capacity: int) -> int:
    if capacity < 0:
        raise ValueError(f"capacity must be >= 0, got {capacity}")
    return int(capacity)
