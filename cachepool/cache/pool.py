"""Time-boxed object pool keyed by kind.

A :class:`PoolCache` keeps several reusable instances per key. ``store``
pushes an instance, ``fetch`` pops the most recently stored one. Instances
that sit unused past the default expiration are reclaimed by a background
:class:`~cachepool.cache.janitor.Janitor`, which runs their finalizer.

The janitor thread lives as long as the cache. Call :meth:`PoolCache.close`
(or use the cache as a context manager) to stop it and finalize whatever is
still pooled; a cache that is never closed keeps its daemon thread alive and
its remaining finalizers never run.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Hashable
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .entry import Finalizer, PoolEntry
from .janitor import Janitor
from .stack import EntryStack

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION = 30.0
DEFAULT_CLEANUP_INTERVAL = 1.0

Duration = Union[float, int, timedelta]


class PoolCache:  # pylint: disable=too-many-instance-attributes
    """Thread-safe pool of reusable instances with expiration sweeps.

    Parameters
    ----------
    default_expiration: float or timedelta
        Lifetime of an unused instance, in seconds. Non-positive values fall
        back to 30 seconds.
    cleanup_interval: float or timedelta
        Seconds between two expiration sweeps. Non-positive values fall back
        to 1 second.
    clock: Callable[[], float]
        Monotonic time source in seconds; ``time.monotonic`` by default.
    """

    def __init__(
        self,
        default_expiration: Duration = DEFAULT_EXPIRATION,
        cleanup_interval: Duration = DEFAULT_CLEANUP_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_expiration = _seconds(default_expiration, DEFAULT_EXPIRATION)
        self._cleanup_interval = _seconds(cleanup_interval, DEFAULT_CLEANUP_INTERVAL)
        self._clock = clock
        self._lock = threading.RLock()
        self._table: Optional[Dict[Hashable, EntryStack]] = {}
        self._close_requested = False
        self._finalizing_thread: Optional[int] = None
        self._janitor = Janitor(self, self._cleanup_interval)
        self._janitor.start()

    @classmethod
    def from_config(cls, config, **kwargs: Any) -> "PoolCache":
        """Build a cache from a :class:`~cachepool.config.models.PoolCacheConfig`."""
        return cls(
            config.default_expiration_seconds,
            config.cleanup_interval_seconds,
            **kwargs,
        )

    @property
    def default_expiration(self) -> float:
        return self._default_expiration

    @property
    def cleanup_interval(self) -> float:
        return self._cleanup_interval

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._table is None

    def store(
        self, key: Hashable, value: Any, finalizer: Optional[Finalizer] = None
    ) -> None:
        """Pool ``value`` under ``key``.

        Raises
        ------
        TypeError
            If ``finalizer`` is neither None nor a :class:`Finalizer`.
        RuntimeError
            If the cache has been closed.
        """
        if finalizer is not None and not isinstance(finalizer, Finalizer):
            raise TypeError(
                "finalizer must be a Finalizer or None, "
                f"got {type(finalizer).__name__}; wrap callables with "
                "Finalizer(func) or Finalizer.ignoring_value(func)"
            )
        with self._lock:
            table = self._open_table()
            entry = PoolEntry(
                key=key,
                value=value,
                expires_at=self._clock() + self._default_expiration,
                finalizer=finalizer,
            )
            stack = table.get(key)
            if stack is None:
                stack = table[key] = EntryStack()
            stack.push(entry)

    def fetch(self, key: Hashable) -> Tuple[Any, bool]:
        """Pop the most recently stored instance for ``key``.

        Expiration is not checked: an instance stays fetchable until a sweep
        reclaims it. The caller takes ownership, so its finalizer is dropped.
        Returns ``(None, False)`` when nothing is pooled under ``key``.
        """
        with self._lock:
            table = self._open_table()
            stack = table.get(key)
            if stack is None:
                return None, False
            entry = stack.pop()
            if not stack:
                del table[key]
            return entry.value, True

    def flush(self) -> int:
        """Reclaim expired instances and run their finalizers.

        Returns the number of instances reclaimed. Instances left under a key
        may come back in a different order after a sweep.
        """
        with self._lock:
            if self._table is None:
                return 0
            now = self._clock()
            reclaimed: List[PoolEntry] = []
            for key in list(self._table):
                stack = self._table[key]
                reclaimed.extend(stack.remove_expired(now))
                if not stack:
                    del self._table[key]
            if not reclaimed:
                return 0
            self._finalize(reclaimed)
            logger.debug(
                "pool_cache.flushed",
                extra={"reclaimed": len(reclaimed), "keys": len(self._table or ())},
            )
            return len(reclaimed)

    def clean(self) -> int:
        """Finalize every pooled instance and close the cache.

        Runs once from the janitor on :meth:`close`. Later calls are no-ops.
        Returns the number of instances finalized.
        """
        with self._lock:
            if self._table is None:
                return 0
            table, self._table = self._table, None
            entries = [entry for stack in table.values() for entry in stack.drain()]
            self._finalize(entries)
            logger.info("pool_cache.cleaned", extra={"finalized": len(entries)})
            return len(entries)

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the janitor and wait for it to clean the cache.

        Safe to call more than once. When called from a finalizer the janitor
        is only signalled; it cleans once the running sweep releases the lock.
        """
        with self._lock:
            if self._close_requested:
                return
            self._close_requested = True
            # a finalizer closing the pool runs under the lock the janitor's
            # clean needs, so joining here would never return
            in_sweep = self._finalizing_thread == threading.get_ident()
        self._janitor.stop(timeout, wait=not in_sweep)

    def keys(self) -> List[Hashable]:
        """Snapshot of keys that currently have pooled instances."""
        with self._lock:
            return list(self._table or ())

    def __len__(self) -> int:
        with self._lock:
            return sum(len(stack) for stack in (self._table or {}).values())

    def __enter__(self) -> "PoolCache":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"entries={len(self)}"
        return (
            f"{type(self).__name__}({state}, "
            f"default_expiration={self._default_expiration}, "
            f"cleanup_interval={self._cleanup_interval})"
        )

    def _open_table(self) -> Dict[Hashable, EntryStack]:
        if self._table is None:
            raise RuntimeError("PoolCache is closed")
        return self._table

    def _finalize(self, entries: Iterable[PoolEntry]) -> None:
        # lock must be held
        previous, self._finalizing_thread = (
            self._finalizing_thread,
            threading.get_ident(),
        )
        try:
            for entry in entries:
                try:
                    entry.finalize()
                except Exception:
                    logger.exception(
                        "pool_cache.finalizer_failed", extra={"key": repr(entry.key)}
                    )
        finally:
            self._finalizing_thread = previous


def _seconds(value: Duration, default: float) -> float:
    if isinstance(value, timedelta):
        value = value.total_seconds()
    if value <= 0:
        return default
    return float(value)
