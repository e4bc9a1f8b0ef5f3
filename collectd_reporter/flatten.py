"""Flatten metric snapshots into collectd samples.

Sub-field order per metric shape is fixed; dashboards key on it.
"""

import numbers
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from .metrics.snapshot import (
    CounterSnapshot,
    DistributionSnapshot,
    GaugeSnapshot,
    HistogramSnapshot,
    MeterSnapshot,
    MetricSnapshot,
    TimerSnapshot,
)
from .utils.metrics import Sample
from .utils.status import DataType
from .utils.units import TimeUnit

DISTRIBUTION_FIELDS = ("max", "mean", "min", "stddev", "p50", "p75", "p95", "p98", "p99", "p999")
RATE_FIELDS = ("count", "m1_rate", "m5_rate", "m15_rate", "mean_rate")


def coerce_gauge_value(value: Any) -> Optional[float]:
    """
    Convert a gauge reading to a sample value.

    Any real number (int, float, Decimal, Fraction, numpy scalar) becomes
    a float. Booleans and non-numeric values yield None so the caller can
    skip the gauge.

    Args:
        value: Raw gauge reading

    Returns:
        Optional[float]: Sample value, or None if the reading is not numeric
    """
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return None


def duration_factor(duration_unit: TimeUnit) -> float:
    """Multiplier from nanoseconds to ``duration_unit``."""
    return 1.0 / duration_unit.to_nanos(1)


def rate_factor(rate_unit: TimeUnit) -> float:
    """Multiplier from events per second to events per ``rate_unit``."""
    return rate_unit.to_seconds(1)


def _distribution_values(distribution: DistributionSnapshot, factor: float = 1.0) -> List[float]:
    return [
        distribution.max * factor,
        distribution.mean * factor,
        distribution.min * factor,
        distribution.stddev * factor,
        distribution.median * factor,
        distribution.p75 * factor,
        distribution.p95 * factor,
        distribution.p98 * factor,
        distribution.p99 * factor,
        distribution.p999 * factor,
    ]


def _rate_values(snapshot, factor: float) -> List[Any]:
    return [
        snapshot.count,
        snapshot.m1_rate * factor,
        snapshot.m5_rate * factor,
        snapshot.m15_rate * factor,
        snapshot.mean_rate * factor,
    ]


def flatten_metric(
    identifier: str,
    snapshot: MetricSnapshot,
    timestamp: int,
    interval: int,
    rate_unit: TimeUnit = TimeUnit.SECONDS,
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS,
) -> List[Sample]:
    """
    Produce the ordered samples representing one metric.

    Args:
        identifier: Prefixed metric identifier
        snapshot: Metric state captured this cycle
        timestamp: Cycle timestamp, seconds since epoch
        interval: Reporting interval in seconds
        rate_unit: Unit rates are expressed per
        duration_unit: Unit timer durations are expressed in

    Returns:
        List[Sample]: Samples in sub-field order; empty for a non-numeric gauge

    Raises:
        TypeError: If ``snapshot`` is not a known snapshot type
    """
    fields: List[Tuple[Optional[str], Any, DataType]]

    if isinstance(snapshot, GaugeSnapshot):
        value = coerce_gauge_value(snapshot.value)
        fields = [] if value is None else [(None, value, DataType.GAUGE)]

    elif isinstance(snapshot, CounterSnapshot):
        fields = [(None, int(snapshot.count), DataType.COUNTER)]

    elif isinstance(snapshot, HistogramSnapshot):
        # count stays GAUGE-typed even though it is a running total
        values = [snapshot.count] + _distribution_values(snapshot.distribution)
        names = ("count",) + DISTRIBUTION_FIELDS
        fields = [(name, v, DataType.GAUGE) for name, v in zip(names, values)]

    elif isinstance(snapshot, MeterSnapshot):
        values = _rate_values(snapshot, rate_factor(rate_unit))
        fields = [(name, v, DataType.GAUGE) for name, v in zip(RATE_FIELDS, values)]

    elif isinstance(snapshot, TimerSnapshot):
        values = (
            _distribution_values(snapshot.distribution, duration_factor(duration_unit))
            + _rate_values(snapshot, rate_factor(rate_unit))
        )
        names = DISTRIBUTION_FIELDS + RATE_FIELDS
        fields = [(name, v, DataType.GAUGE) for name, v in zip(names, values)]

    else:
        raise TypeError(f"Cannot flatten {type(snapshot).__name__}")

    return [
        Sample(
            identifier=identifier,
            sub_field=sub_field,
            value=value,
            timestamp=timestamp,
            kind=kind,
            interval=interval,
        )
        for sub_field, value, kind in fields
    ]
