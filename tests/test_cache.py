"""Tests for the chunk LRU cache."""

from __future__ import annotations

import pytest

from logpeek.cache import ChunkCache, ChunkKey


class TestChunkKey:
    def test_aligns_to_chunk_start(self) -> None:
        assert ChunkKey.for_line(1, 500, 1200) == ChunkKey(1, 500)
        assert ChunkKey.for_line(500, 500, 1200) == ChunkKey(1, 500)
        assert ChunkKey.for_line(501, 500, 1200) == ChunkKey(501, 500)

    def test_last_chunk_is_clipped(self) -> None:
        key = ChunkKey.for_line(1100, 500, 1200)
        assert key == ChunkKey(1001, 200)
        assert key.end == 1200


class TestChunkCache:
    def test_get_missing(self) -> None:
        cache = ChunkCache(2)
        assert cache.get(ChunkKey(1, 10)) is None
        assert cache.misses == 1

    def test_put_and_get(self) -> None:
        cache = ChunkCache(2)
        cache.put(ChunkKey(1, 2), ["a", "b"])
        assert cache.get(ChunkKey(1, 2)) == ["a", "b"]
        assert cache.hits == 1

    def test_capacity_plus_one_evicts_least_recent(self) -> None:
        cache = ChunkCache(3)
        keys = [ChunkKey(start, 10) for start in (1, 11, 21, 31)]
        for key in keys:
            cache.put(key, [str(key.start)])
        assert len(cache) == 3
        assert keys[0] not in cache
        assert cache.keys() == keys[1:]

    def test_get_refreshes_recency(self) -> None:
        cache = ChunkCache(2)
        old, new, newest = ChunkKey(1, 10), ChunkKey(11, 10), ChunkKey(21, 10)
        cache.put(old, ["old"])
        cache.put(new, ["new"])
        cache.get(old)
        cache.put(newest, ["newest"])
        assert old in cache
        assert new not in cache

    def test_overlapping_keys_are_independent(self) -> None:
        cache = ChunkCache(4)
        cache.put(ChunkKey(1, 10), ["wide"])
        cache.put(ChunkKey(1, 5), ["narrow"])
        assert cache.get(ChunkKey(1, 10)) == ["wide"]
        assert cache.get(ChunkKey(1, 5)) == ["narrow"]

    def test_replacing_existing_key_does_not_evict(self) -> None:
        cache = ChunkCache(2)
        cache.put(ChunkKey(1, 10), ["a"])
        cache.put(ChunkKey(11, 10), ["b"])
        cache.put(ChunkKey(1, 10), ["a2"])
        assert len(cache) == 2
        assert cache.keys() == [ChunkKey(11, 10), ChunkKey(1, 10)]

    def test_clear(self) -> None:
        cache = ChunkCache(2, threadsafe=True)
        cache.put(ChunkKey(1, 10), ["a"])
        cache.clear()
        assert len(cache) == 0

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity must be >= 1"):
            ChunkCache(0)
