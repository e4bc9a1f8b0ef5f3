"""Sample and cycle result data structures."""

from dataclasses import dataclass
from typing import Optional, Union

from .status import CycleStatus, DataType


@dataclass(frozen=True)
class Sample:
    """One value sent to the collectd daemon."""

    identifier: str
    sub_field: Optional[str]  # None only for gauges and counters
    value: Union[int, float]
    timestamp: int  # Seconds since epoch
    kind: DataType
    interval: int  # Seconds


@dataclass
class CycleResult:
    """Standard result format of a reporting cycle."""

    status: CycleStatus
    timestamp: int
    samples_sent: int = 0
    samples_skipped: int = 0  # Gauges whose value was not numeric
    reason: Optional[str] = None  # Set when the transport failed

    @property
    def succeeded(self) -> bool:
        """True when every sample of the cycle was handed to the transport."""
        return self.status is CycleStatus.SUCCESS
