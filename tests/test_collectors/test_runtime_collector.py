"""Tests for BaseCollector and RuntimeCollector."""

import logging
import threading

from collectd_reporter.collectors.base import BaseCollector
from collectd_reporter.collectors.runtime_collector import RuntimeCollector
from collectd_reporter.flatten import coerce_gauge_value
from collectd_reporter.metrics.snapshot import MetricKind


class MockCollector(BaseCollector):
    """Mock collector for testing BaseCollector functionality."""

    def __init__(self, namespace="mock", logger=None):
        super().__init__(namespace, logger or logging.getLogger(__name__))

    def register(self, registry):
        registry.counter(self._name("events"))
        return [self._name("events")]


class TestBaseCollector:
    """Test suite for BaseCollector."""

    def test_names_under_namespace(self, registry):
        """Test that metrics are registered under the collector namespace."""
        names = MockCollector().register(registry)

        assert names == ["mock.events"]
        assert registry.names() == ["mock.events"]

    def test_collector_logger_hierarchy(self):
        """Test that collector creates child logger."""
        parent_logger = logging.getLogger("test_parent")
        collector = MockCollector(logger=parent_logger)

        assert collector.logger.name == "test_parent.MockCollector"


class TestRuntimeCollector:
    """Test suite for RuntimeCollector."""

    def test_registers_gauges(self, registry, logger):
        """Test that every runtime metric is a gauge under the namespace."""
        names = RuntimeCollector(logger).register(registry)

        assert "process.uptime_s" in names
        assert "process.threads" in names
        assert {"process.gc.gen0", "process.gc.gen1", "process.gc.gen2"} <= set(names)
        assert set(registry.snapshot(MetricKind.GAUGE)) == set(names)

    def test_values_are_numeric(self, registry, logger):
        """Test that every runtime gauge produces a reportable value."""
        RuntimeCollector(logger).register(registry)

        for name, snapshot in registry.snapshot(MetricKind.GAUGE).items():
            assert coerce_gauge_value(snapshot.value) is not None, name

    def test_thread_count(self, registry, logger):
        """Test that the thread gauge tracks the live thread count."""
        RuntimeCollector(logger).register(registry)

        snapshot = registry.snapshot(MetricKind.GAUGE)["process.threads"]
        assert snapshot.value == threading.active_count()

    def test_custom_namespace(self, registry, logger):
        """Test registering under a different namespace."""
        names = RuntimeCollector(logger, namespace="worker").register(registry)

        assert all(name.startswith("worker.") for name in names)
