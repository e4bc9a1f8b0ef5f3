"""Gauges describing the reporter's own Python process."""

import gc
import logging
import threading
import time

try:
    import resource
except ImportError:
    # Not available on Windows
    resource = None

from .base import BaseCollector
from ..metrics.registry import MetricRegistry


class RuntimeCollector(BaseCollector):
    """Registers uptime, thread count, GC and memory gauges."""

    def __init__(self, logger: logging.Logger, namespace: str = "process"):
        super().__init__(namespace, logger)
        self._started = time.monotonic()

    def register(self, registry: MetricRegistry) -> list:
        gauges = {
            self._name("uptime_s"): lambda: time.monotonic() - self._started,
            self._name("threads"): threading.active_count,
        }

        for generation in range(3):
            gauges[self._name("gc", f"gen{generation}")] = self._gc_count(generation)

        if resource is not None:
            gauges[self._name("max_rss")] = self._max_rss
        else:
            self.logger.debug("resource module unavailable, skipping max_rss")

        for name, fn in gauges.items():
            registry.gauge(name, fn)

        self.logger.info(f"Registered {len(gauges)} runtime gauges")
        return list(gauges)

    @staticmethod
    def _gc_count(generation: int):
        return lambda: gc.get_count()[generation]

    @staticmethod
    def _max_rss() -> int:
        return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
