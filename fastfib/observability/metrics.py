"""
Prometheus Metrics Collection for fastfib

Tracks computation latency, computation outcomes and cache lookups using the
Prometheus client library. All metrics live in the default registry.
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Histogram, Counter, REGISTRY, generate_latest


# Buckets spanning cached lookups (microseconds) to huge indices (tens of seconds)
LATENCY_BUCKETS = (0.0001, 0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0)


compute_latency_histogram = Histogram(
    'fastfib_compute_latency_seconds',
    'Fibonacci computation latency in seconds',
    labelnames=['strategy'],
    buckets=LATENCY_BUCKETS
)

compute_count = Counter(
    'fastfib_compute_total',
    'Total number of Fibonacci computations',
    labelnames=['status', 'strategy']
)

cache_lookups = Counter(
    'fastfib_cache_lookups_total',
    'Pair cache lookups by result',
    labelnames=['result']
)


class MetricsRegistry:
    """
    Singleton registry for Prometheus metrics export.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern - ensures only one registry instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def export(self) -> str:
        """
        Export all metrics in Prometheus text format.

        Returns:
            str: Prometheus-formatted metrics text
        """
        return generate_latest(REGISTRY).decode('utf-8')


def record_cache_lookup(hit: bool) -> None:
    """Count a single cache lookup as a hit or a miss."""
    cache_lookups.labels(result="hit" if hit else "miss").inc()


@contextmanager
def track_latency(strategy: str) -> Generator[None, None, None]:
    """
    Context manager for automatic latency tracking.

    Records the block's duration to compute_latency_histogram.

    Args:
        strategy: Fast-doubling strategy name used for the label

    Example:
        >>> with track_latency(strategy="iterative"):
        ...     engine.compute(10_000)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        compute_latency_histogram.labels(strategy=strategy).observe(
            time.perf_counter() - start
        )


@contextmanager
def track_operation(strategy: str) -> Generator[None, None, None]:
    """
    Context manager for automatic operation counting.

    Increments success/error counters based on the block's outcome.

    Raises:
        Exception: Re-raises any exception after recording error metric
    """
    try:
        yield
        compute_count.labels(status="success", strategy=strategy).inc()
    except Exception:
        compute_count.labels(status="error", strategy=strategy).inc()
        raise
