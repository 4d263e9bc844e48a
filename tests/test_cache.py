"""Tests for the resolved-path LRU cache."""

import pytest

from ntfsmft.core.cache import PathCache


def test_get_and_put():
    cache = PathCache(max_entries=4)
    cache.put(30, "Users")

    assert cache.get(30) == "Users"
    assert cache.get(31) is None
    assert 30 in cache
    assert len(cache) == 1


def test_least_recently_used_is_evicted():
    cache = PathCache(max_entries=2)
    cache.put(1, "a")
    cache.put(2, "b")
    cache.get(1)
    cache.put(3, "c")

    assert 1 in cache
    assert 2 not in cache
    assert 3 in cache
    assert cache.get_stats().eviction_count == 1


def test_put_refreshes_existing_key():
    cache = PathCache(max_entries=2)
    cache.put(1, "a")
    cache.put(2, "b")
    cache.put(1, "a2")
    cache.put(3, "c")

    assert cache.get(1) == "a2"
    assert 2 not in cache


def test_stats():
    cache = PathCache(max_entries=10)
    cache.put(1, "a")
    cache.get(1)
    cache.get(1)
    cache.get(2)

    stats = cache.get_stats()

    assert stats.total_entries == 1
    assert stats.max_entries == 10
    assert stats.hit_count == 2
    assert stats.miss_count == 1
    assert stats.hit_rate == pytest.approx(2 / 3)


def test_empty_stats():
    assert PathCache().get_stats().hit_rate == 0.0


def test_clear():
    cache = PathCache(max_entries=10)
    cache.put(1, "a")
    cache.put(2, "b")

    assert cache.clear() == 2
    assert len(cache) == 0


@pytest.mark.parametrize("size", [0, -5])
def test_invalid_size(size):
    with pytest.raises(ValueError):
        PathCache(max_entries=size)
