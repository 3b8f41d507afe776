"""Pair caching for repeated Fibonacci queries.

This module provides the memo table used by the fast-doubling engine so
that indices visited by one query are not recomputed by the next.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Dict, NamedTuple, Optional


class FibPair(NamedTuple):
    """Two consecutive sequence values anchored at an index n."""

    current: int  # F(n)
    next: int  # F(n+1)


class PairCache:
    """Thread-safe, unbounded index -> FibPair cache.

    Entries are derived data and are never evicted; the owning engine
    clears them explicitly. Inserts never overwrite, so concurrent
    computations of the same index all observe the first stored pair.

    Example:
        >>> cache = PairCache()
        >>> cache.put_if_absent(5, FibPair(5, 8))
        FibPair(current=5, next=8)
        >>> cache.get(5)
        FibPair(current=5, next=8)
        >>> cache.get(6) is None
        True
    """

    def __init__(self) -> None:
        self._cache: Dict[int, FibPair] = {}
        self._lock = Lock()

        # Metrics
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        """Return number of entries in cache."""
        with self._lock:
            return len(self._cache)

    def __contains__(self, n: object) -> bool:
        with self._lock:
            return n in self._cache

    def get(self, n: int) -> Optional[FibPair]:
        """Get the cached pair for index n.

        Args:
            n: Index to look up

        Returns:
            Cached pair or None if not present
        """
        with self._lock:
            pair = self._cache.get(n)
            if pair is None:
                self._misses += 1
            else:
                self._hits += 1
            return pair

    def put_if_absent(self, n: int, pair: FibPair) -> FibPair:
        """Store pair for index n unless one is already cached.

        Args:
            n: Index the pair is anchored at
            pair: (F(n), F(n+1))

        Returns:
            The pair held by the cache after the call
        """
        with self._lock:
            existing = self._cache.get(n)
            if existing is not None:
                return existing
            self._cache[n] = pair
            return pair

    def indices(self) -> list[int]:
        """Return the cached indices in ascending order."""
        with self._lock:
            return sorted(self._cache)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_metrics(self) -> Dict[str, Any]:
        """Get cache metrics.

        Returns:
            Dict with hits, misses, hit_rate, size
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total if total > 0 else 0.0

            return {
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": hit_rate,
                "size": len(self._cache),
            }
