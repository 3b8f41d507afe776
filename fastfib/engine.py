"""
Fast-doubling Fibonacci engine.

Computes exact values of F(n) for any non-negative index using the
doubling identities

    F(2k)   = F(k) * (2*F(k+1) - F(k))
    F(2k+1) = F(k)^2 + F(k+1)^2

which halve the index at every step, so F(n) costs O(log n) big-integer
multiplications. Results are Python ints and never lose precision.

Example:
    >>> engine = FastDoublingEngine()
    >>> engine.compute(100)
    354224848179261915075
    >>> engine.compute_pair(10)
    FibPair(current=55, next=89)
"""

from __future__ import annotations

import logging
import math
import numbers
import warnings
from contextlib import ExitStack, nullcontext
from threading import Lock
from typing import ContextManager, List, Optional, Union

from fastfib.caching import FibPair, PairCache
from fastfib.config import Strategy, get_engine_config, get_metrics_config
from fastfib.errors import (
    ConfigurationError,
    InvalidArgumentError,
    LargeIndexWarning,
    ResourceExhaustedError,
)
from fastfib.observability.metrics import record_cache_lookup, track_latency, track_operation

logger = logging.getLogger(__name__)

LOG10_PHI = math.log10((1 + math.sqrt(5)) / 2)

_BASE_PAIR = FibPair(0, 1)


def validate_index(n: object) -> int:
    """Return n as a plain int, or raise InvalidArgumentError.

    Any integral number is accepted except bool. Floats are rejected even
    when integral-valued; nothing is coerced or truncated.
    """
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidArgumentError(
            f"Fibonacci index must be an integer, got {type(n).__name__}"
        )
    index = int(n)
    if index < 0:
        raise InvalidArgumentError(f"Fibonacci index cannot be negative, got {index}")
    return index


def _double(pair: FibPair, odd: bool) -> FibPair:
    """Step from the pair at k to the pair at 2k (or 2k+1 when odd)."""
    a, b = pair
    c = a * (2 * b - a)
    d = a * a + b * b
    if odd:
        return FibPair(d, c + d)
    return FibPair(c, d)


class FastDoublingEngine:
    """
    Exact Fibonacci calculator based on fast doubling.

    Each engine owns a PairCache. When memoization is enabled every index
    visited while answering a query is stored, so later queries for that
    index, or for any index whose halving chain passes through it, reuse
    the stored pair. The cache only grows; call reset() to empty it.

    Engines are safe to share between threads: cache access is locked and
    all arithmetic happens outside the lock.

    Attributes:
        strategy (Strategy): ITERATIVE or RECURSIVE formulation
        memoize (bool): Whether visited pairs are cached
        cache (PairCache): The engine's memo table
    """

    def __init__(
        self,
        strategy: Union[Strategy, str, None] = None,
        memoize: Optional[bool] = None,
        large_index_warning: Optional[int] = None,
        metrics_enabled: Optional[bool] = None,
    ) -> None:
        """
        Initialize the engine. Arguments left as None come from configuration.

        Args:
            strategy: "iterative" or "recursive"
            memoize: Cache every visited pair
            large_index_warning: Emit LargeIndexWarning above this index (0 disables)
            metrics_enabled: Record Prometheus metrics

        Raises:
            ConfigurationError: If the strategy is unknown or the warning
                threshold is not a non-negative integer
        """
        engine_config = get_engine_config()

        self._strategy = Strategy.parse(strategy if strategy is not None else engine_config.strategy)
        self._memoize = engine_config.memoize if memoize is None else bool(memoize)

        if large_index_warning is None:
            large_index_warning = engine_config.large_index_warning
        elif (
            isinstance(large_index_warning, bool)
            or not isinstance(large_index_warning, numbers.Integral)
            or large_index_warning < 0
        ):
            raise ConfigurationError(
                f"large_index_warning must be a non-negative integer, got {large_index_warning!r}"
            )
        self._large_index_warning = int(large_index_warning)
        self._metrics_enabled = (
            get_metrics_config().enabled if metrics_enabled is None else bool(metrics_enabled)
        )
        self._cache = PairCache()

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def memoize(self) -> bool:
        return self._memoize

    @property
    def cache(self) -> PairCache:
        return self._cache

    def __repr__(self) -> str:
        return (
            f"FastDoublingEngine(strategy={self._strategy.value!r}, "
            f"memoize={self._memoize}, cached={len(self._cache)})"
        )

    def compute(self, n: int) -> int:
        """
        Calculate F(n) exactly.

        Args:
            n: Non-negative integer index

        Returns:
            The nth Fibonacci number

        Raises:
            InvalidArgumentError: If n is negative or not an integer
            ResourceExhaustedError: If memory runs out while computing

        Examples:
            >>> FastDoublingEngine().compute(71)
            308061521170129
        """
        return self._compute_pair(n, stacklevel=4).current

    def compute_pair(self, n: int) -> FibPair:
        """
        Calculate (F(n), F(n+1)) exactly.

        Raises:
            InvalidArgumentError: If n is negative or not an integer
            ResourceExhaustedError: If memory runs out while computing
        """
        return self._compute_pair(n, stacklevel=4)

    def _compute_pair(self, n: int, stacklevel: int) -> FibPair:
        """Shared body of the public entry points.

        stacklevel is counted from the warnings.warn call, so 4 points a
        LargeIndexWarning at whoever called the public entry point.
        """
        index = validate_index(n)
        self._warn_if_large(index, stacklevel)

        with self._tracked():
            try:
                if self._strategy is Strategy.RECURSIVE:
                    pair = self._pair_recursive(index)
                else:
                    pair = self._pair_iterative(index)
            except MemoryError as e:
                logger.error(f"Out of memory computing F({index})")
                raise ResourceExhaustedError(
                    f"Insufficient memory to compute F({index}) "
                    f"(~{index * LOG10_PHI:.0f} digits)"
                ) from e

        logger.debug(f"Computed F({index}) ({pair.current.bit_length()} bits)")
        return pair

    def reset(self) -> None:
        """Clear every memoized pair."""
        size = len(self._cache)
        self._cache.clear()
        logger.info(f"Cleared {size} cached Fibonacci pairs")

    def _tracked(self) -> ContextManager[None]:
        if not self._metrics_enabled:
            return nullcontext()
        stack = ExitStack()
        stack.enter_context(track_operation(strategy=self._strategy.value))
        stack.enter_context(track_latency(strategy=self._strategy.value))
        return stack

    def _warn_if_large(self, index: int, stacklevel: int) -> None:
        if self._large_index_warning and index > self._large_index_warning:
            warnings.warn(
                f"Calculating F({index}) produces an extremely large number "
                f"(~{index * LOG10_PHI:.0f} digits)",
                LargeIndexWarning,
                stacklevel=stacklevel,
            )

    def _lookup(self, index: int) -> Optional[FibPair]:
        if not self._memoize:
            return None
        pair = self._cache.get(index)
        if self._metrics_enabled:
            record_cache_lookup(hit=pair is not None)
        if pair is not None:
            logger.debug(f"Cache hit for F({index})")
        return pair

    def _store(self, index: int, pair: FibPair) -> FibPair:
        if not self._memoize:
            return pair
        return self._cache.put_if_absent(index, pair)

    def _pair_recursive(self, index: int) -> FibPair:
        """Halving recursion; depth is the bit length of index."""
        if index == 0:
            return _BASE_PAIR

        cached = self._lookup(index)
        if cached is not None:
            return cached

        half = self._pair_recursive(index >> 1)
        return self._store(index, _double(half, bool(index & 1)))

    def _pair_iterative(self, index: int) -> FibPair:
        """MSB-first loop visiting the same indices as the recursion.

        Walks down the prefixes index, index >> 1, ... until one is cached
        (or 0 is reached), then doubles back up, storing each prefix.
        """
        pending: List[int] = []
        pair = _BASE_PAIR
        k = index
        while k > 0:
            cached = self._lookup(k)
            if cached is not None:
                pair = cached
                break
            pending.append(k)
            k >>= 1

        for k in reversed(pending):
            pair = self._store(k, _double(pair, bool(k & 1)))
        return pair


# ============================================================================
# SHARED DEFAULT ENGINE
# ============================================================================

_engine: Optional[FastDoublingEngine] = None
_engine_lock = Lock()


def get_engine() -> FastDoublingEngine:
    """Get the process-wide default engine, creating it from configuration."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = FastDoublingEngine()
        return _engine


def reset_engine() -> None:
    """Drop the default engine and its cache (for testing or reconfiguration)."""
    global _engine
    with _engine_lock:
        _engine = None


def fibonacci(n: int) -> int:
    """
    Convenience function to calculate a single Fibonacci number.

    Uses the shared default engine, so repeated calls benefit from its cache.
    For isolated caches, create a FastDoublingEngine directly.

    Examples:
        >>> fibonacci(10)
        55
    """
    return get_engine()._compute_pair(n, stacklevel=4).current


def fibonacci_pair(n: int) -> FibPair:
    """Return (F(n), F(n+1)) from the shared default engine."""
    return get_engine()._compute_pair(n, stacklevel=4)
