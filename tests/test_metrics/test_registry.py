"""Tests for MetricRegistry and metric filters."""

import pytest

from collectd_reporter.metrics.core import Counter, Gauge, Histogram, Meter, Timer
from collectd_reporter.metrics.registry import MetricRegistry, accept_all, metric_filter_from_globs
from collectd_reporter.metrics.snapshot import (
    CounterSnapshot,
    GaugeSnapshot,
    HistogramSnapshot,
    MeterSnapshot,
    MetricKind,
    TimerSnapshot,
)


class TestMetricRegistry:
    """Test suite for MetricRegistry."""

    def test_get_or_create_returns_same_instance(self, registry):
        """Test that asking twice for a name returns the same metric."""
        assert registry.counter("requests") is registry.counter("requests")
        assert registry.timer("latency") is registry.timer("latency")

    def test_type_conflict(self, registry):
        """Test that a name cannot be reused for a different metric type."""
        registry.counter("requests")

        with pytest.raises(ValueError, match="already registered as counter"):
            registry.timer("requests")

    def test_register_duplicate(self, registry):
        """Test that explicit registration of an existing name fails."""
        registry.register("jobs", Counter())

        with pytest.raises(ValueError, match="already exists"):
            registry.register("jobs", Counter())

    def test_empty_name_rejected(self, registry):
        """Test that empty metric names are rejected."""
        with pytest.raises(ValueError):
            registry.counter("")
        with pytest.raises(ValueError):
            registry.register("", Counter())

    def test_remove(self, registry):
        """Test removal by name."""
        registry.counter("requests")

        assert registry.remove("requests") is True
        assert registry.remove("requests") is False
        assert registry.names() == []

    def test_names_sorted(self, registry):
        """Test that names are listed in sorted order."""
        registry.counter("b")
        registry.meter("a")
        assert registry.names() == ["a", "b"]

    def test_name_helper(self):
        """Test dotted name construction skipping empty parts."""
        assert MetricRegistry.name("http", "", "requests") == "http.requests"

    def test_snapshot_by_kind(self, registry):
        """Test that each kind's snapshot only holds metrics of that kind."""
        registry.gauge("g", lambda: 1)
        registry.counter("c").inc(2)
        registry.histogram("h").update(5)
        registry.meter("m").mark()
        registry.timer("t").update(100)

        assert registry.snapshot(MetricKind.GAUGE) == {"g": GaugeSnapshot(value=1)}
        assert registry.snapshot(MetricKind.COUNTER) == {"c": CounterSnapshot(count=2)}
        assert isinstance(registry.snapshot(MetricKind.HISTOGRAM)["h"], HistogramSnapshot)
        assert isinstance(registry.snapshot(MetricKind.METER)["m"], MeterSnapshot)
        assert isinstance(registry.snapshot(MetricKind.TIMER)["t"], TimerSnapshot)

    def test_metrics_returns_live_objects_without_reading(self, registry):
        """Test that selecting metrics does not evaluate gauge callables."""
        calls = []
        gauge = registry.gauge("g", lambda: calls.append(1) or 1)
        registry.counter("c")

        assert registry.metrics(MetricKind.GAUGE) == {"g": gauge}
        assert calls == []

    def test_snapshot_sorted_by_name(self, registry):
        """Test that snapshots iterate in name order regardless of registration order."""
        for name in ("c", "a", "b"):
            registry.counter(name)

        assert list(registry.snapshot(MetricKind.COUNTER)) == ["a", "b", "c"]

    def test_snapshot_is_detached(self, registry):
        """Test that a snapshot does not change when the metric does."""
        counter = registry.counter("c")
        counter.inc()
        snapshot = registry.snapshot(MetricKind.COUNTER)

        counter.inc(10)

        assert snapshot["c"].count == 1

    def test_snapshot_filter_receives_metric(self, registry):
        """Test that the filter is called with name and metric object."""
        registry.counter("c")
        seen = []

        def metric_filter(name, metric):
            seen.append((name, type(metric)))
            return False

        assert registry.snapshot(MetricKind.COUNTER, metric_filter) == {}
        assert seen == [("c", Counter)]

    def test_registered_metric_types(self, registry):
        """Test the concrete type returned by each factory."""
        assert isinstance(registry.gauge("g", lambda: 0), Gauge)
        assert isinstance(registry.histogram("h"), Histogram)
        assert isinstance(registry.meter("m"), Meter)
        assert isinstance(registry.timer("t"), Timer)


class TestMetricFilters:
    """Test suite for glob-based metric filters."""

    def test_no_patterns_accepts_all(self):
        """Test that no patterns yields the accept-all filter."""
        assert metric_filter_from_globs() is accept_all

    def test_include(self):
        """Test include patterns."""
        metric_filter = metric_filter_from_globs(include=["http.*"])

        assert metric_filter("http.requests", Counter())
        assert not metric_filter("db.queries", Counter())

    def test_exclude_wins_over_include(self):
        """Test that exclusion applies after inclusion."""
        metric_filter = metric_filter_from_globs(include=["http.*"], exclude=["*.debug"])

        assert metric_filter("http.requests", Counter())
        assert not metric_filter("http.debug", Counter())

    def test_case_sensitive(self):
        """Test that matching is case-sensitive."""
        metric_filter = metric_filter_from_globs(include=["HTTP.*"])
        assert not metric_filter("http.requests", Counter())
