"""Sample value kinds and report cycle outcomes."""

from enum import Enum


class DataType(Enum):
    """collectd data source type attached to every sample."""

    GAUGE = "gauge"
    COUNTER = "counter"


class CycleStatus(Enum):
    """Outcome of one reporting cycle."""

    SUCCESS = "success"
    PARTIAL = "partial"
    ABORTED = "aborted"
