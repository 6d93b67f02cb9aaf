"""Tests for the bounded LRU rewrite cache."""

import threading

import pytest

from cache import RewriteCache
from expression import integer


def _entry(n):
    return (integer(n), (), 1)


class TestRewriteCache:
    """Tests for lookup, eviction and statistics."""

    def test_get_and_put(self):
        """A stored entry comes back and counts as a hit."""
        cache = RewriteCache(4)
        assert cache.get("a") is None
        cache.put("a", _entry(1))
        assert cache.get("a") == _entry(1)
        info = cache.info()
        assert (info.hits, info.misses, info.size, info.capacity) == (1, 1, 1, 4)

    def test_least_recently_used_evicted(self):
        """Reading an entry protects it from eviction."""
        cache = RewriteCache(2)
        cache.put("a", _entry(1))
        cache.put("b", _entry(2))
        cache.get("a")
        cache.put("c", _entry(3))
        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_clear(self):
        """clear drops entries and statistics."""
        cache = RewriteCache(2)
        cache.put("a", _entry(1))
        cache.get("a")
        cache.clear()
        info = cache.info()
        assert (info.hits, info.misses, info.size) == (0, 0, 0)

    def test_capacity_must_be_positive(self):
        """A zero capacity is rejected."""
        with pytest.raises(ValueError):
            RewriteCache(0)

    def test_parallel_writers(self):
        """Concurrent puts never exceed the capacity."""
        cache = RewriteCache(16)

        def work(offset):
            for i in range(200):
                cache.put((offset, i), _entry(i))
                cache.get((offset, i // 2))

        threads = [threading.Thread(target=work, args=(k,)) for k in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 16
