"""Thread-safe metric primitives: counters, gauges, histograms, meters, timers."""

import math
import random
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

from ..utils.clock import Clock, DEFAULT_CLOCK
from ..utils.units import TimeUnit
from .snapshot import (
    CounterSnapshot,
    DistributionSnapshot,
    GaugeSnapshot,
    HistogramSnapshot,
    MeterSnapshot,
    MetricKind,
    MetricSnapshot,
    TimerSnapshot,
)


class Metric(ABC):
    """Abstract base class for all registrable metrics."""

    kind: MetricKind

    @abstractmethod
    def snapshot(self) -> MetricSnapshot:
        """
        Capture the current state as an immutable snapshot.

        Returns:
            MetricSnapshot: Point-in-time copy of this metric
        """
        pass


class Counter(Metric):
    """Integer total that is incremented and decremented explicitly."""

    kind = MetricKind.COUNTER

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    @property
    def count(self) -> int:
        return self._count

    def snapshot(self) -> CounterSnapshot:
        return CounterSnapshot(count=self._count)


class Gauge(Metric):
    """Instantaneous reading obtained by calling a function at snapshot time."""

    kind = MetricKind.GAUGE

    def __init__(self, fn: Callable[[], Any]):
        self._fn = fn

    @property
    def value(self) -> Any:
        return self._fn()

    def snapshot(self) -> GaugeSnapshot:
        return GaugeSnapshot(value=self._fn())


class UniformReservoir:
    """
    Fixed-size random sample of a stream (Vitter's algorithm R).

    Every value ever offered has the same chance of being kept, so the
    reservoir represents the whole lifetime of the metric.
    """

    DEFAULT_SIZE = 1028

    def __init__(self, size: int = DEFAULT_SIZE, rng: Optional[random.Random] = None):
        if size <= 0:
            raise ValueError(f"Reservoir size must be positive, got {size}")
        self._values: List[float] = []
        self._size = size
        self._seen = 0
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._seen += 1
            if len(self._values) < self._size:
                self._values.append(value)
                return

            slot = self._rng.randrange(self._seen)
            if slot < self._size:
                self._values[slot] = value

    def __len__(self) -> int:
        return len(self._values)

    def snapshot(self) -> DistributionSnapshot:
        with self._lock:
            values = list(self._values)
        return DistributionSnapshot.from_values(values)


class Histogram(Metric):
    """Distribution of recorded values."""

    kind = MetricKind.HISTOGRAM

    def __init__(self, reservoir: Optional[UniformReservoir] = None):
        self._reservoir = reservoir if reservoir is not None else UniformReservoir()
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
        self._reservoir.update(value)

    @property
    def count(self) -> int:
        return self._count

    def distribution(self) -> DistributionSnapshot:
        return self._reservoir.snapshot()

    def snapshot(self) -> HistogramSnapshot:
        return HistogramSnapshot(count=self._count, distribution=self.distribution())


class EWMA:
    """
    Exponentially-weighted moving average of an event rate.

    Uncounted events are folded into the average on every tick. The rate
    is stored per nanosecond internally and exposed per second.
    """

    TICK_INTERVAL_S = 5

    def __init__(self, alpha: float, interval_s: int = TICK_INTERVAL_S):
        self._alpha = alpha
        self._interval_ns = interval_s * TimeUnit.SECONDS.value
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False
        self._lock = threading.Lock()

    @classmethod
    def for_minutes(cls, minutes: int) -> "EWMA":
        """Moving average over the given number of minutes, ticking every 5 seconds."""
        alpha = 1 - math.exp(-cls.TICK_INTERVAL_S / 60.0 / minutes)
        return cls(alpha)

    def update(self, n: int) -> None:
        with self._lock:
            self._uncounted += n

    def tick(self) -> None:
        with self._lock:
            count = self._uncounted
            self._uncounted = 0
            instant_rate = count / self._interval_ns
            if self._initialized:
                self._rate += self._alpha * (instant_rate - self._rate)
            else:
                self._rate = instant_rate
                self._initialized = True

    def rate_per_second(self) -> float:
        return self._rate * TimeUnit.SECONDS.value


class Meter(Metric):
    """Event count with 1, 5 and 15 minute moving-average rates."""

    kind = MetricKind.METER

    def __init__(self, clock: Clock = DEFAULT_CLOCK):
        self._clock = clock
        self._count = 0
        self._m1 = EWMA.for_minutes(1)
        self._m5 = EWMA.for_minutes(5)
        self._m15 = EWMA.for_minutes(15)
        self._start_tick = clock.tick()
        self._last_tick = self._start_tick
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        self._tick_if_necessary()
        with self._lock:
            self._count += n
        for ewma in (self._m1, self._m5, self._m15):
            ewma.update(n)

    def _tick_if_necessary(self) -> None:
        interval_ns = EWMA.TICK_INTERVAL_S * TimeUnit.SECONDS.value
        with self._lock:
            now = self._clock.tick()
            age = now - self._last_tick
            if age <= interval_ns:
                return
            ticks = age // interval_ns
            self._last_tick = now - age % interval_ns

        for _ in range(ticks):
            for ewma in (self._m1, self._m5, self._m15):
                ewma.tick()

    @property
    def count(self) -> int:
        return self._count

    @property
    def one_minute_rate(self) -> float:
        self._tick_if_necessary()
        return self._m1.rate_per_second()

    @property
    def five_minute_rate(self) -> float:
        self._tick_if_necessary()
        return self._m5.rate_per_second()

    @property
    def fifteen_minute_rate(self) -> float:
        self._tick_if_necessary()
        return self._m15.rate_per_second()

    @property
    def mean_rate(self) -> float:
        if self._count == 0:
            return 0.0
        elapsed_ns = self._clock.tick() - self._start_tick
        if elapsed_ns <= 0:
            return 0.0
        return self._count / elapsed_ns * TimeUnit.SECONDS.value

    def snapshot(self) -> MeterSnapshot:
        return MeterSnapshot(
            count=self._count,
            m1_rate=self.one_minute_rate,
            m5_rate=self.five_minute_rate,
            m15_rate=self.fifteen_minute_rate,
            mean_rate=self.mean_rate,
        )


class Timer(Metric):
    """Histogram of durations (in nanoseconds) plus a meter of call rate."""

    kind = MetricKind.TIMER

    def __init__(self, clock: Clock = DEFAULT_CLOCK, reservoir: Optional[UniformReservoir] = None):
        self._clock = clock
        self._histogram = Histogram(reservoir)
        self._meter = Meter(clock)

    def update(self, duration: float, unit: TimeUnit = TimeUnit.NANOSECONDS) -> None:
        """
        Record one duration.

        Negative durations are ignored.

        Args:
            duration: Elapsed time
            unit: Unit of ``duration``
        """
        if duration < 0:
            return
        self._histogram.update(unit.to_nanos(duration))
        self._meter.mark()

    @contextmanager
    def time(self) -> Iterator[None]:
        """Time the enclosed block, recording even when it raises."""
        start = self._clock.tick()
        try:
            yield
        finally:
            self.update(self._clock.tick() - start)

    @property
    def count(self) -> int:
        return self._histogram.count

    def snapshot(self) -> TimerSnapshot:
        meter = self._meter.snapshot()
        return TimerSnapshot(
            count=self._histogram.count,
            distribution=self._histogram.distribution(),
            m1_rate=meter.m1_rate,
            m5_rate=meter.m5_rate,
            m15_rate=meter.m15_rate,
            mean_rate=meter.mean_rate,
        )
