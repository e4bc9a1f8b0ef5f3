"""Clock abstraction so reporters and meters can be driven by tests."""

import time


class Clock:
    """Wall-clock time for sample timestamps, monotonic ticks for rates."""

    def time(self) -> float:
        """Seconds since epoch."""
        return time.time()

    def tick(self) -> int:
        """Monotonic nanoseconds, only meaningful as a difference."""
        return time.monotonic_ns()


DEFAULT_CLOCK = Clock()
