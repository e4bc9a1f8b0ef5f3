"""Time units used for rate, duration and period conversion."""

from enum import Enum


class TimeUnit(Enum):
    """Unit of time, valued in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 3_600 * 1_000_000_000
    DAYS = 86_400 * 1_000_000_000

    @classmethod
    def parse(cls, name: str) -> "TimeUnit":
        """
        Look up a unit by name, case-insensitively.

        Args:
            name: Unit name (e.g., "seconds", "MILLISECONDS")

        Returns:
            TimeUnit: Matching unit

        Raises:
            ValueError: If no unit has that name
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(unit.name.lower() for unit in cls)
            raise ValueError(f"Unknown time unit '{name}'. Expected one of: {valid}") from None

    def to_nanos(self, amount: float) -> float:
        """Convert an amount of this unit to nanoseconds."""
        return amount * self.value

    def to_seconds(self, amount: float) -> float:
        """Convert an amount of this unit to seconds."""
        return amount * self.value / TimeUnit.SECONDS.value

    @property
    def label(self) -> str:
        """Lowercase unit name, singular (e.g., "second")."""
        return self.name.lower()[:-1]
