"""Base collector abstract class for metric collectors."""

from abc import ABC, abstractmethod
import logging

from ..metrics.registry import MetricRegistry


class BaseCollector(ABC):
    """Abstract base class for all collectors."""

    def __init__(self, namespace: str, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            namespace: Name component prepended to every metric registered
            logger: Logger instance
        """
        self.namespace = namespace
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def register(self, registry: MetricRegistry) -> list:
        """
        Register this collector's metrics.

        Args:
            registry: Registry the metrics are added to

        Returns:
            list: Names of the registered metrics
        """
        pass

    def _name(self, *components: str) -> str:
        """Metric name under this collector's namespace."""
        return MetricRegistry.name(self.namespace, *components)
