"""Read-only metric state handed to the reporter each cycle.

The registry materializes one of these per metric at snapshot time. They
are plain frozen dataclasses so the flattener never touches live,
concurrently-updated metric objects.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union


class MetricKind(Enum):
    """Metric shapes, declared in reporting order."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"
    METER = "meter"
    TIMER = "timer"


@dataclass(frozen=True)
class DistributionSnapshot:
    """Statistical summary of a set of recorded values."""

    min: float = 0
    max: float = 0
    mean: float = 0.0
    stddev: float = 0.0
    median: float = 0.0
    p75: float = 0.0
    p95: float = 0.0
    p98: float = 0.0
    p99: float = 0.0
    p999: float = 0.0
    size: int = 0

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "DistributionSnapshot":
        """
        Summarize a sample of values.

        An empty sample yields all-zero statistics.

        Args:
            values: Recorded values in any order

        Returns:
            DistributionSnapshot: Summary of the values
        """
        ordered = sorted(values)
        n = len(ordered)
        if n == 0:
            return cls()

        mean = math.fsum(ordered) / n
        if n > 1:
            variance = math.fsum((v - mean) ** 2 for v in ordered) / (n - 1)
            stddev = math.sqrt(variance)
        else:
            stddev = 0.0

        return cls(
            min=ordered[0],
            max=ordered[-1],
            mean=mean,
            stddev=stddev,
            median=_quantile(ordered, 0.5),
            p75=_quantile(ordered, 0.75),
            p95=_quantile(ordered, 0.95),
            p98=_quantile(ordered, 0.98),
            p99=_quantile(ordered, 0.99),
            p999=_quantile(ordered, 0.999),
            size=n,
        )


def _quantile(ordered: Sequence[float], quantile: float) -> float:
    """Linear interpolation between closest ranks, position q * (n + 1)."""
    n = len(ordered)
    pos = quantile * (n + 1)
    index = int(pos)

    if index < 1:
        return float(ordered[0])
    if index >= n:
        return float(ordered[-1])

    lower = ordered[index - 1]
    upper = ordered[index]
    return lower + (pos - math.floor(pos)) * (upper - lower)


@dataclass(frozen=True)
class GaugeSnapshot:
    value: Any  # Whatever the gauge callable returned, numeric or not


@dataclass(frozen=True)
class CounterSnapshot:
    count: int


@dataclass(frozen=True)
class HistogramSnapshot:
    count: int  # Total updates, not the reservoir size
    distribution: DistributionSnapshot


@dataclass(frozen=True)
class MeterSnapshot:
    """Event count and rates in events per second."""

    count: int
    m1_rate: float
    m5_rate: float
    m15_rate: float
    mean_rate: float


@dataclass(frozen=True)
class TimerSnapshot:
    """Durations in nanoseconds, rates in events per second."""

    count: int
    distribution: DistributionSnapshot
    m1_rate: float
    m5_rate: float
    m15_rate: float
    mean_rate: float


MetricSnapshot = Union[GaugeSnapshot, CounterSnapshot, HistogramSnapshot, MeterSnapshot, TimerSnapshot]
