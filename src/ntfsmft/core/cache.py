"""Bounded in-memory cache for resolved entry paths.

Keys are MFT entry numbers, values are slash-joined paths. Least
recently used entries are evicted once the cache is full.
"""

from collections import OrderedDict

from pydantic import BaseModel

DEFAULT_CACHE_SIZE = 1000


class CacheStats(BaseModel):
    """Cache statistics."""

    total_entries: int
    max_entries: int
    hit_count: int
    miss_count: int
    eviction_count: int
    hit_rate: float


class PathCache:
    """LRU cache mapping entry numbers to resolved paths."""

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity; must be at least 1
        """
        if max_entries < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[int, str] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_number: int) -> bool:
        return entry_number in self._entries

    def get(self, entry_number: int) -> str | None:
        """Get a cached path and mark it as recently used.

        Args:
            entry_number: MFT entry number

        Returns:
            Cached path or None on a miss
        """
        path = self._entries.get(entry_number)
        if path is None:
            self._misses += 1
            return None

        self._entries.move_to_end(entry_number)
        self._hits += 1
        return path

    def put(self, entry_number: int, path: str) -> None:
        """Store a path, evicting the least recently used entry if full."""
        self._entries[entry_number] = path
        self._entries.move_to_end(entry_number)
        self._maybe_evict()

    def clear(self) -> int:
        """Drop all entries.

        Returns:
            Number of entries removed
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def get_stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            total_entries=len(self._entries),
            max_entries=self.max_entries,
            hit_count=self._hits,
            miss_count=self._misses,
            eviction_count=self._evictions,
            hit_rate=self._hits / total if total > 0 else 0.0,
        )

    def _maybe_evict(self) -> None:
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            self._evictions += 1
