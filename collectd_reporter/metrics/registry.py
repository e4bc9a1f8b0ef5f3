"""Central registry of named metrics."""

import fnmatch
import threading
from typing import Callable, Dict, Iterable, List, Optional, Type, TypeVar

from ..utils.clock import Clock, DEFAULT_CLOCK
from ..utils.naming import build_name
from .core import Counter, Gauge, Histogram, Meter, Metric, Timer
from .snapshot import MetricKind, MetricSnapshot

MetricFilter = Callable[[str, Metric], bool]

M = TypeVar("M", bound=Metric)


def accept_all(name: str, metric: Metric) -> bool:
    """Default filter: report every metric."""
    return True


def metric_filter_from_globs(
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
) -> MetricFilter:
    """
    Build a name-based filter from shell-style glob patterns.

    A metric is reported when it matches at least one include pattern
    (or no include patterns are given) and matches no exclude pattern.

    Args:
        include: Patterns such as "http.*"
        exclude: Patterns such as "*.debug"

    Returns:
        MetricFilter: Predicate over (name, metric)
    """
    include = list(include or [])
    exclude = list(exclude or [])

    if not include and not exclude:
        return accept_all

    def _filter(name: str, metric: Metric) -> bool:
        if include and not any(fnmatch.fnmatchcase(name, pattern) for pattern in include):
            return False
        return not any(fnmatch.fnmatchcase(name, pattern) for pattern in exclude)

    return _filter


class MetricRegistry:
    """
    Thread-safe mapping of metric names to metrics.

    Names are unique across kinds: asking for a counter under a name that
    already holds a timer is an error.
    """

    def __init__(self, clock: Clock = DEFAULT_CLOCK):
        self._metrics: Dict[str, Metric] = {}
        self._clock = clock
        self._lock = threading.Lock()

    @staticmethod
    def name(*components: Optional[str]) -> str:
        """Dotted metric name from components, skipping empty ones."""
        return build_name(None, *components)

    def register(self, name: str, metric: M) -> M:
        """
        Register a metric under a name.

        Args:
            name: Metric name
            metric: Metric instance

        Returns:
            The registered metric

        Raises:
            ValueError: If the name is empty or already registered
        """
        if not name:
            raise ValueError("Metric name must not be empty")

        with self._lock:
            if name in self._metrics:
                raise ValueError(f"A metric named '{name}' already exists")
            self._metrics[name] = metric
            return metric

    def remove(self, name: str) -> bool:
        """
        Remove a metric by name.

        Returns:
            bool: True if removed, False if not found
        """
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._metrics)

    def gauge(self, name: str, fn: Callable[[], object]) -> Gauge:
        """Register a gauge reading ``fn()`` at each snapshot, or return the existing one."""
        return self._get_or_add(name, Gauge, lambda: Gauge(fn))

    def counter(self, name: str) -> Counter:
        return self._get_or_add(name, Counter, Counter)

    def histogram(self, name: str) -> Histogram:
        return self._get_or_add(name, Histogram, Histogram)

    def meter(self, name: str) -> Meter:
        return self._get_or_add(name, Meter, lambda: Meter(self._clock))

    def timer(self, name: str) -> Timer:
        return self._get_or_add(name, Timer, lambda: Timer(self._clock))

    def _get_or_add(self, name: str, metric_type: Type[M], factory: Callable[[], M]) -> M:
        if not name:
            raise ValueError("Metric name must not be empty")

        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                metric = factory()
                self._metrics[name] = metric
                return metric

        if not isinstance(existing, metric_type):
            raise ValueError(
                f"Metric '{name}' is already registered as {existing.kind.value}, "
                f"not {metric_type.kind.value}"
            )
        return existing

    def metrics(
        self,
        kind: MetricKind,
        metric_filter: MetricFilter = accept_all,
    ) -> Dict[str, Metric]:
        """
        Select every metric of one kind that passes the filter.

        Args:
            kind: Metric kind to select
            metric_filter: Predicate over (name, metric)

        Returns:
            Dict[str, Metric]: Metrics keyed by name, in name order
        """
        with self._lock:
            matching = [
                (name, metric) for name, metric in self._metrics.items()
                if metric.kind is kind
            ]

        return {
            name: metric
            for name, metric in sorted(matching, key=lambda item: item[0])
            if metric_filter(name, metric)
        }

    def snapshot(
        self,
        kind: MetricKind,
        metric_filter: MetricFilter = accept_all,
    ) -> Dict[str, MetricSnapshot]:
        """Capture every metric of one kind that passes the filter, in name order."""
        # Gauge callables run outside the lock
        return {
            name: metric.snapshot()
            for name, metric in self.metrics(kind, metric_filter).items()
        }
