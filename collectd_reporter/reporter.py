"""Scheduled reporter publishing a metric registry to collectd."""

import logging
import math
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config.models import ReporterSystemConfig
from .cycle import ReportingConfig, run_report_cycle
from .metrics.registry import MetricRegistry
from .metrics.snapshot import MetricKind
from .services.collectd_client import TransportClient
from .utils.metrics import CycleResult
from .utils.units import TimeUnit

JOB_ID = "collectd_report"


class CollectdReporter:
    """
    Periodically sends every metric of a registry to collectd.

    Rates are converted to events per ``rate_unit`` and timer durations
    to ``duration_unit``. Each sample carries the interval given to the
    most recent :meth:`start`; a reporter that was never started reports
    an interval of 0.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        client: TransportClient,
        config: Optional[ReportingConfig] = None,
        logger: logging.Logger = None,
    ):
        """
        Initialize collectd reporter.

        Args:
            registry: Metrics to report
            client: Transport owning the daemon connection
            config: Clock, prefix, units and filter (defaults if omitted)
            logger: Optional logger instance
        """
        self.registry = registry
        self.client = client
        self.config = config or ReportingConfig()
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)
        self.interval = 0
        self.scheduler: Optional[BackgroundScheduler] = None

    @classmethod
    def from_config(
        cls,
        registry: MetricRegistry,
        client: TransportClient,
        system_config: ReporterSystemConfig,
        logger: logging.Logger = None,
    ) -> "CollectdReporter":
        """
        Build a reporter from the loaded configuration file.

        Args:
            registry: Metrics to report
            client: Transport owning the daemon connection
            system_config: Validated configuration
            logger: Optional logger instance

        Returns:
            CollectdReporter: Reporter, not yet started
        """
        settings = system_config.reporting
        config = ReportingConfig(
            prefix=settings.prefix,
            rate_unit=settings.rate_unit,
            duration_unit=settings.duration_unit,
            metric_filter=system_config.metric_filter(),
        )
        return cls(registry, client, config, logger)

    def report(self) -> CycleResult:
        """
        Run one reporting cycle now.

        Returns:
            CycleResult: Outcome of the cycle; transport failures are not raised
        """
        def metrics(kind: MetricKind):
            return self.registry.metrics(kind, self.config.metric_filter)

        return run_report_cycle(
            metrics,
            self.client,
            self.config,
            self.interval,
            logger=self.logger,
        )

    def start(self, period: int, unit: TimeUnit = TimeUnit.SECONDS) -> None:
        """
        Report every ``period`` ``unit``, replacing any running schedule.

        The period converted to whole seconds (at least 1) becomes the
        interval attached to every later sample.

        Args:
            period: Positive number of units between cycles
            unit: Unit of ``period``

        Raises:
            ValueError: If period is not a positive integer
        """
        if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
            raise ValueError(f"Reporting period must be a positive integer, got {period!r}")

        seconds = unit.to_seconds(period)
        self.interval = max(1, math.ceil(seconds))

        if self.scheduler is None:
            self.scheduler = BackgroundScheduler()

        self.scheduler.add_job(
            self.report,
            trigger=IntervalTrigger(seconds=seconds),
            id=JOB_ID,
            name='collectd reporting cycle',
            max_instances=1,  # Prevent overlapping executions
            coalesce=True,  # If missed, run once
            replace_existing=True,
        )

        if not self.scheduler.running:
            self.scheduler.start()

        self.logger.info(
            f"Reporting to collectd every {period} {unit.name.lower()} "
            f"(rates per {self.config.rate_unit.label}, "
            f"durations in {self.config.duration_unit.name.lower()})"
        )

    def stop(self, report_on_stop: bool = False) -> None:
        """
        Stop the schedule and close the transport.

        Args:
            report_on_stop: Run one last cycle before closing
        """
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=True)
        self.scheduler = None

        if report_on_stop:
            self.report()

        self.client.close()
        self.logger.info("Reporter stopped")

    def __enter__(self) -> "CollectdReporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
