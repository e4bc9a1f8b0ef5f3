"""Pydantic configuration models for the collectd reporter."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from ..metrics.registry import metric_filter_from_globs
from ..utils.units import TimeUnit


class CollectdConfig(BaseModel):
    """Address of the collectd network plugin listener."""
    host: str = "localhost"
    port: int = Field(default=25826, ge=1, le=65535)
    hostname: Optional[str] = None  # Reported host field, defaults to this machine's FQDN
    timeout_s: float = Field(default=5.0, gt=0)


class ReportingSettings(BaseModel):
    """Naming, unit conversion, schedule and filtering of reported metrics."""
    prefix: Optional[str] = None
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    period: int = Field(default=10, gt=0)
    period_unit: TimeUnit = TimeUnit.SECONDS
    report_on_stop: bool = True
    include: List[str] = Field(default_factory=list)  # fnmatch globs over metric names
    exclude: List[str] = Field(default_factory=list)

    @field_validator('rate_unit', 'duration_unit', 'period_unit', mode='before')
    @classmethod
    def parse_time_unit(cls, v):
        """Accept unit names such as "seconds" as well as TimeUnit members."""
        if isinstance(v, str):
            return TimeUnit.parse(v)
        return v

    @field_validator('prefix')
    @classmethod
    def strip_prefix(cls, v: Optional[str]) -> Optional[str]:
        """Trailing separators would produce empty identifier components."""
        if v is None:
            return v
        return v.strip().strip('.') or None


class LoggingConfig(BaseModel):
    """Log output configuration."""
    level: str = "INFO"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'Invalid log level: {v}')
        return v


class ReporterSystemConfig(BaseModel):
    """Root configuration model for the reporter process."""
    model_config = ConfigDict(frozen=True)

    collectd: CollectdConfig = Field(default_factory=CollectdConfig)
    reporting: ReportingSettings = Field(default_factory=ReportingSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def metric_filter(self):
        """Filter predicate compiled from the include/exclude globs."""
        return metric_filter_from_globs(self.reporting.include, self.reporting.exclude)
