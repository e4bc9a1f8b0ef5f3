"""Shared pytest configuration and fixtures."""

import pytest

from collectd_reporter.metrics.registry import MetricRegistry
from collectd_reporter.utils.clock import Clock
from collectd_reporter.utils.logger import setup_logger


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now
        self.ticks = 0

    def time(self) -> float:
        return self.now

    def tick(self) -> int:
        return self.ticks

    def advance(self, seconds: float):
        self.now += seconds
        self.ticks += int(seconds * 1_000_000_000)


class RecordingClient:
    """Transport double that records sent samples and can be told to fail."""

    target = "collectd.test:25826"

    def __init__(self, connected: bool = False, fail_connect: bool = False, fail_after: int = None):
        self.connected = connected
        self.fail_connect = fail_connect
        self.fail_after = fail_after
        self.connect_calls = 0
        self.closed = False
        self.sent = []

    def is_connected(self) -> bool:
        return self.connected

    def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise ConnectionRefusedError("collectd unreachable")
        self.connected = True

    def send(self, sample) -> None:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise OSError("network is down")
        self.sent.append(sample)

    def close(self) -> None:
        self.closed = True
        self.connected = False


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def clock():
    """Manual clock starting at a fixed epoch second."""
    return ManualClock()


@pytest.fixture
def registry(clock):
    """Empty registry driven by the manual clock."""
    return MetricRegistry(clock=clock)


@pytest.fixture
def client():
    """Recording transport, initially disconnected."""
    return RecordingClient()


@pytest.fixture
def make_client():
    """Factory for transport doubles with failure options."""
    return RecordingClient
