"""Entry records shared by the LRU and pool caches.

An LRU entry carries a cost (``size``) and a last-access timestamp; a pool
entry carries an absolute expiration and an optional :class:`Finalizer` that
is run exactly once when the entry is reclaimed.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, runtime_checkable

# Reported as the oldest access time of an empty LRU cache.
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@runtime_checkable
class SizedValue(Protocol):
    """Values that know their own approximate cost in cache units."""

    def size(self) -> int:
        ...


def value_size(value: Any, size: int) -> int:
    """Resolve the cost of ``value``.

    An explicit positive ``size`` wins. Otherwise the value's own
    :meth:`SizedValue.size` is used, or 0 when the value does not provide one.
    """
    if size > 0:
        return size
    if isinstance(value, SizedValue):
        return max(0, int(value.size()))
    return 0


class Finalizer:
    """Cleanup callback run once when a pooled value is reclaimed.

    The callback always receives the pooled value. Use
    :meth:`ignoring_value` to wrap a callback that takes no arguments.

    Parameters
    ----------
    func: Callable[[Any], None]
        Callable invoked with the value being reclaimed.
    """

    __slots__ = ("func", "name")

    def __init__(self, func: Callable[[Any], None], name: Optional[str] = None):
        if not callable(func):
            raise TypeError(f"Finalizer requires a callable, got {type(func).__name__}")
        self.func = func
        self.name = name or getattr(func, "__qualname__", repr(func))

    @classmethod
    def ignoring_value(cls, func: Callable[[], None]) -> "Finalizer":
        """Build a finalizer from a zero-argument callable."""
        if not callable(func):
            raise TypeError(f"Finalizer requires a callable, got {type(func).__name__}")

        def _call(_value: Any) -> None:
            func()

        return cls(_call, name=getattr(func, "__qualname__", repr(func)))

    def __call__(self, value: Any) -> None:
        self.func(value)

    def __repr__(self) -> str:
        return f"Finalizer({self.name})"


@dataclass
class LRUEntry:
    """One value indexed by :class:`~cachepool.cache.lru.LRUCache`."""

    key: Hashable
    value: Any
    size: int
    accessed: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.accessed = utcnow()


@dataclass
class PoolEntry:
    """One pooled instance held by :class:`~cachepool.cache.pool.PoolCache`.

    Attributes
    ----------
    key: Hashable
        Pool kind the instance was stored under.
    value: Any
        The pooled instance.
    expires_at: float
        Absolute expiration on the owning cache's clock.
    finalizer: Optional[Finalizer]
        Cleanup callback; cleared as soon as it has been invoked.
    """

    key: Hashable
    value: Any
    expires_at: float
    finalizer: Optional[Finalizer] = None

    def expired(self, now: float) -> bool:
        return self.expires_at < now

    def finalize(self) -> bool:
        """Run the finalizer if one is still attached.

        The reference is dropped before the call so a second invocation is a
        no-op. Returns True when a callback was run.
        """
        finalizer, self.finalizer = self.finalizer, None
        if finalizer is None:
            return False
        assert isinstance(finalizer, Finalizer), f"unexpected finalizer {finalizer!r}"
        finalizer(self.value)
        return True
