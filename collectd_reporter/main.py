"""Main application entry point for the collectd metrics reporter."""

import argparse
import logging
import os
import signal
import sys
import threading

from .collectors.runtime_collector import RuntimeCollector
from .config.loader import ConfigLoader
from .config.models import ReporterSystemConfig
from .metrics.registry import MetricRegistry
from .reporter import CollectdReporter
from .services.collectd_client import CollectdClient
from .utils.logger import setup_logger


class ReporterApp:
    """
    Reporter application.

    Wires the registry, collectors, collectd client and reporter together
    and runs the reporting schedule until a shutdown signal arrives.
    """

    def __init__(
        self,
        config_path: str = "config/config.yaml",
        log_level: str = None,
        registry: MetricRegistry = None
    ):
        """
        Initialize reporter application.

        Args:
            config_path: Path to configuration file
            log_level: Overrides the configured log level
            registry: Registry to report (a new one if omitted)
        """
        self.config_path = config_path
        self.logger = setup_logger("collectd_reporter", log_level or "INFO")
        self._shutdown = threading.Event()

        self.config = self._load_config()
        if log_level is None:
            self.logger.setLevel(self.config.logging.level)

        self.registry = registry or MetricRegistry()
        RuntimeCollector(self.logger).register(self.registry)

        self.client = CollectdClient(self.config.collectd, self.logger.getChild("CollectdClient"))
        self.reporter = CollectdReporter.from_config(
            self.registry, self.client, self.config, self.logger
        )
        self.logger.info("Application initialized successfully")

    def _load_config(self) -> ReporterSystemConfig:
        """
        Load and validate configuration.

        Returns:
            ReporterSystemConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        try:
            self.logger.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load_from_file(self.config_path)
            self.logger.info("Configuration loaded successfully")
            return config

        except FileNotFoundError:
            self.logger.error(
                f"Configuration file not found: {self.config_path}\n"
                "Please create config/config.yaml from config/config.example.yaml"
            )
            sys.exit(1)

        except Exception as e:
            self.logger.error(
                f"Failed to load configuration: {e}",
                exc_info=True
            )
            sys.exit(1)

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        self._shutdown.set()

    def run_once(self) -> int:
        """
        Run one reporting cycle.

        Returns:
            int: Process exit code, 0 if every sample was sent
        """
        result = self.reporter.report()
        self.logger.info(
            f"Cycle {result.status.value}: {result.samples_sent} sent, "
            f"{result.samples_skipped} skipped"
        )
        self.client.close()
        return 0 if result.succeeded else 1

    def run_forever(self):
        """
        Report on the configured schedule until SIGTERM/SIGINT.
        """
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        settings = self.config.reporting
        self.reporter.start(settings.period, settings.period_unit)

        try:
            self.logger.info("Reporter running. Press Ctrl+C to exit.")
            self._shutdown.wait()
        finally:
            self.reporter.stop(report_on_stop=settings.report_on_stop)


def main():
    """
    CLI entry point.

    Parses command-line arguments and starts the reporter.
    """
    parser = argparse.ArgumentParser(
        description='Report in-process metrics to a collectd daemon',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report on the configured schedule (default)
  python -m collectd_reporter.main

  # Send one cycle and exit (useful for testing)
  python -m collectd_reporter.main --run-once

  # Use custom config file
  python -m collectd_reporter.main --config /path/to/config.yaml
        """
    )

    parser.add_argument(
        '--config',
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--run-once',
        action='store_true',
        help='Run one reporting cycle and exit (no scheduler)'
    )

    parser.add_argument(
        '--log-level',
        default=os.getenv('LOG_LEVEL'),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: config file or LOG_LEVEL env var)'
    )

    args = parser.parse_args()

    try:
        app = ReporterApp(
            config_path=args.config,
            log_level=args.log_level
        )

        if args.run_once:
            sys.exit(app.run_once())
        else:
            app.run_forever()

    except Exception as e:
        logging.error(f"Application startup failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
