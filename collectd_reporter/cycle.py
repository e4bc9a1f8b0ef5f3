"""One reporting pass: connect if needed, then send every metric in kind order."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from .flatten import flatten_metric
from .metrics.core import Metric
from .metrics.registry import MetricFilter, accept_all
from .metrics.snapshot import MetricKind
from .services.collectd_client import TransportClient
from .utils.clock import Clock, DEFAULT_CLOCK
from .utils.metrics import CycleResult
from .utils.naming import build_name
from .utils.status import CycleStatus
from .utils.units import TimeUnit

REPORT_ORDER = (
    MetricKind.GAUGE,
    MetricKind.COUNTER,
    MetricKind.HISTOGRAM,
    MetricKind.METER,
    MetricKind.TIMER,
)

MetricSource = Callable[[MetricKind], Mapping[str, Metric]]


@dataclass(frozen=True)
class ReportingConfig:
    """Operator options fixed for the lifetime of a reporter."""

    clock: Clock = field(default=DEFAULT_CLOCK)
    prefix: Optional[str] = None
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    metric_filter: MetricFilter = field(default=accept_all)


def run_report_cycle(
    metrics: MetricSource,
    client: TransportClient,
    config: ReportingConfig,
    interval: int,
    logger: logging.Logger = None,
) -> CycleResult:
    """
    Send one cycle's samples for every metric kind.

    The timestamp is read from the clock once, up front. A non-numeric
    gauge, or a metric whose read raises, is skipped and the cycle goes
    on. An exception from the transport ends the cycle early; it is
    logged as a warning and reported through the result, never raised.

    Args:
        metrics: Returns the filtered, name-ordered metrics of a kind
        client: Transport the samples are sent through
        config: Prefix, units and clock
        interval: Seconds between cycles, attached to every sample
        logger: Optional logger instance

    Returns:
        CycleResult: Outcome with sent/skipped counts
    """
    logger = logger or logging.getLogger(__name__)
    timestamp = int(config.clock.time())
    result = CycleResult(status=CycleStatus.SUCCESS, timestamp=timestamp)

    try:
        if not client.is_connected():
            client.connect()

        for kind in REPORT_ORDER:
            for name, metric in metrics(kind).items():
                identifier = build_name(config.prefix, name)
                try:
                    snapshot = metric.snapshot()
                except Exception as e:
                    logger.warning(
                        f"Unable to read metric {identifier}: {type(e).__name__}: {e}",
                        exc_info=True,
                        extra={"metric": identifier, "error_type": type(e).__name__}
                    )
                    result.samples_skipped += 1
                    continue

                samples = flatten_metric(
                    identifier,
                    snapshot,
                    timestamp=timestamp,
                    interval=interval,
                    rate_unit=config.rate_unit,
                    duration_unit=config.duration_unit,
                )
                if not samples:
                    logger.debug(f"Skipping non-numeric gauge {identifier}")
                    result.samples_skipped += 1
                    continue

                for sample in samples:
                    client.send(sample)
                    result.samples_sent += 1

    except Exception as e:
        target = getattr(client, "target", type(client).__name__)
        result.status = CycleStatus.PARTIAL if result.samples_sent else CycleStatus.ABORTED
        result.reason = f"{type(e).__name__}: {e}"
        logger.warning(
            f"Unable to report to collectd at {target}",
            exc_info=True,
            extra={
                "target": target,
                "samples_sent": result.samples_sent,
                "error_type": type(e).__name__,
            }
        )
        return result

    logger.debug(
        f"Reported {result.samples_sent} samples "
        f"({result.samples_skipped} skipped) at {timestamp}"
    )
    return result
