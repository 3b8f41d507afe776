"""
Tests for fastfib Prometheus metrics.

Covers the metric objects, the tracking context managers and the
engine's metric recording.
"""

import unittest

import pytest
from prometheus_client import REGISTRY

from fastfib.engine import FastDoublingEngine
from fastfib.errors import InvalidArgumentError


def sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.unit
class TestPrometheusMetrics(unittest.TestCase):
    """Test Prometheus metrics collection and export."""

    def test_export_contains_metrics(self):
        from fastfib.observability.metrics import MetricsRegistry

        output = MetricsRegistry().export()

        self.assertIn("fastfib_compute_total", output)
        self.assertIn("fastfib_compute_latency_seconds", output)
        self.assertIn("fastfib_cache_lookups_total", output)

    def test_registry_is_singleton(self):
        from fastfib.observability.metrics import MetricsRegistry

        self.assertIs(MetricsRegistry(), MetricsRegistry())

    def test_track_operation_counts_errors(self):
        from fastfib.observability.metrics import track_operation

        labels = {"status": "error", "strategy": "test"}
        before = sample("fastfib_compute_total", labels)

        with self.assertRaises(RuntimeError):
            with track_operation(strategy="test"):
                raise RuntimeError("boom")

        self.assertEqual(sample("fastfib_compute_total", labels), before + 1)

    def test_track_latency_observes(self):
        from fastfib.observability.metrics import track_latency

        labels = {"strategy": "test"}
        before = sample("fastfib_compute_latency_seconds_count", labels)

        with track_latency(strategy="test"):
            pass

        self.assertEqual(sample("fastfib_compute_latency_seconds_count", labels), before + 1)


@pytest.mark.unit
class TestEngineMetrics(unittest.TestCase):
    """The engine records computations and cache lookups."""

    def test_successful_computation_is_counted(self):
        labels = {"status": "success", "strategy": "recursive"}
        before = sample("fastfib_compute_total", labels)
        latency_before = sample("fastfib_compute_latency_seconds_count", {"strategy": "recursive"})

        engine = FastDoublingEngine(strategy="recursive", large_index_warning=0, metrics_enabled=True)
        engine.compute(100)
        engine.compute(200)

        self.assertEqual(sample("fastfib_compute_total", labels), before + 2)
        self.assertEqual(
            sample("fastfib_compute_latency_seconds_count", {"strategy": "recursive"}),
            latency_before + 2,
        )

    def test_cache_lookups_are_counted(self):
        hits_before = sample("fastfib_cache_lookups_total", {"result": "hit"})
        misses_before = sample("fastfib_cache_lookups_total", {"result": "miss"})

        engine = FastDoublingEngine(
            strategy="iterative", memoize=True, large_index_warning=0, metrics_enabled=True
        )
        engine.compute(11)  # 11, 5, 2, 1 all miss
        engine.compute(5)  # hit

        self.assertEqual(sample("fastfib_cache_lookups_total", {"result": "miss"}), misses_before + 4)
        self.assertEqual(sample("fastfib_cache_lookups_total", {"result": "hit"}), hits_before + 1)

    def test_invalid_argument_is_not_counted(self):
        labels = {"status": "error", "strategy": "iterative"}
        before = sample("fastfib_compute_total", labels)

        engine = FastDoublingEngine(strategy="iterative", metrics_enabled=True)
        with self.assertRaises(InvalidArgumentError):
            engine.compute(-1)

        self.assertEqual(sample("fastfib_compute_total", labels), before)

    def test_metrics_disabled_records_nothing(self):
        labels = {"status": "success", "strategy": "iterative"}
        before = sample("fastfib_compute_total", labels)

        FastDoublingEngine(strategy="iterative", metrics_enabled=False).compute(42)

        self.assertEqual(sample("fastfib_compute_total", labels), before)


if __name__ == '__main__':
    unittest.main()
