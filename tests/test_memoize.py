"""Tests for LRU-backed memoization."""

from __future__ import annotations

from cachetools.keys import hashkey

from cachepool.cache.lru import LRUCache
from cachepool.utils.cache import memoize, result_size


class Blob:
    def __init__(self, n: int) -> None:
        self.n = n

    def size(self) -> int:
        return self.n


def test_memoize_caches_results():
    calls = []

    @memoize(capacity=10)
    def square(x):
        calls.append(x)
        return x * x

    assert square(3) == 9
    assert square(3) == 9
    assert square(4) == 16
    assert calls == [3, 4]
    assert square.lru.keys() == [hashkey(4), hashkey(3)]


def test_memoize_evicts_least_recently_used_result():
    calls = []

    @memoize(capacity=2)
    def ident(x):
        calls.append(x)
        return x

    ident(1)
    ident(2)
    ident(1)
    ident(3)  # evicts 2
    ident(1)
    ident(2)
    assert calls == [1, 2, 3, 2]


def test_memoize_uses_shared_cache_and_result_size():
    cache = LRUCache(10)

    @memoize(cache)
    def make(n):
        return Blob(n)

    make(4)
    make(5)
    assert cache.stats().size == 9
    make(3)  # 12 > 10, oldest result goes
    assert cache.stats().size == 8
    assert hashkey(4) not in cache
    assert make.lru is cache


def test_memoize_custom_key_and_size():
    calls = []

    @memoize(capacity=100, key=lambda s: s.lower(), getsizeof=len)
    def shout(s):
        calls.append(s)
        return s.upper()

    assert shout("Hi") == "HI"
    assert shout("hI") == "HI"
    assert calls == ["Hi"]
    assert shout.lru.items()[0].size == 2


def test_result_size():
    assert result_size("x") == 1
    assert result_size(Blob(7)) == 7
    assert result_size(Blob(0)) == 1
