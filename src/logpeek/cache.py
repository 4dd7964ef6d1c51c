"""Bounded LRU cache of line chunks fetched from a remote source."""

from __future__ import annotations

import threading
from collections import OrderedDict
from contextlib import nullcontext
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from contextlib import AbstractContextManager


class ChunkKey(NamedTuple):
    """A block of ``count`` lines starting at 1-based line ``start``."""

    start: int
    count: int

    @classmethod
    def for_line(cls, line: int, chunk_size: int, line_count: int) -> ChunkKey:
        """Chunk-aligned key for the block containing ``line``."""
        start = ((line - 1) // chunk_size) * chunk_size + 1
        return cls(start, min(chunk_size, line_count - start + 1))

    @property
    def end(self) -> int:
        """Last line (inclusive) covered by the chunk."""
        return self.start + self.count - 1


class ChunkCache:
    """Strict least-recently-used mapping from :class:`ChunkKey` to lines.

    Overlapping keys are independent entries. The cache is meant to be owned by
    a single worker; pass ``threadsafe=True`` when several fetchers share it.
    """

    def __init__(self, capacity: int, *, threadsafe: bool = False) -> None:
        if capacity < 1:
            msg = f"capacity must be >= 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: OrderedDict[ChunkKey, list[str]] = OrderedDict()
        self._lock: AbstractContextManager[object] = threading.Lock() if threadsafe else nullcontext()
        self.hits = 0
        self.misses = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: ChunkKey) -> list[str] | None:
        """Return the cached lines and mark them most recently used, or None."""
        with self._lock:
            lines = self._entries.get(key)
            if lines is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return lines

    def put(self, key: ChunkKey, lines: list[str]) -> None:
        """Insert lines, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = lines

    def keys(self) -> list[ChunkKey]:
        """Resident keys, least recently used first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
