"""Pydantic schemas for blkiostat.

This module defines the configuration contract consumed by the engine and
the derived rate records handed to the report renderer.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, computed_field, field_validator

from blkiostat.core.constants import DEFAULT_REGISTRY_CAPACITY, MAX_INTERVAL_SECONDS


class OutputFormat(str, Enum):
    """Report output formats."""

    TEXT = "text"  # Column layout of the classic iostat
    JSON = "json"  # One JSON object per reported interval


class MonitorConfig(BaseModel):
    """Configuration for a monitoring session.

    Attributes:
        show_whole_device: Show whole disks of the known IDE/SCSI classes
        show_partitions: Show partitions of the known IDE/SCSI classes
        extended_mode: Print the extended per-device table
        utilization_mode: Print r/s, w/s and %b per device
        cpu_reporting_enabled: Print the CPU breakdown
        name_filter: Explicit device names to monitor, in report order
        registry_capacity: Soft limit on the number of monitored devices
        interval_seconds: Delay between samples
        count: Number of reported intervals, None for unlimited
        proc_root: Location of the proc filesystem
        clock_ticks_per_sec: Scheduler tick rate, None to ask the OS
        output_format: Report format
    """

    show_whole_device: bool = Field(default=True)
    show_partitions: bool = Field(default=False)
    extended_mode: bool = Field(default=False)
    utilization_mode: bool = Field(default=False)
    cpu_reporting_enabled: bool = Field(default=False)
    name_filter: list[str] = Field(default_factory=list)
    registry_capacity: int = Field(default=DEFAULT_REGISTRY_CAPACITY, ge=1)
    interval_seconds: float = Field(
        default=1.0, ge=0, le=MAX_INTERVAL_SECONDS, description="Sampling interval"
    )
    count: int | None = Field(default=None, ge=1, description="Reported intervals")
    proc_root: Path = Field(default=Path("/proc"))
    clock_ticks_per_sec: int | None = Field(default=None, ge=1)
    output_format: OutputFormat = Field(default=OutputFormat.TEXT)

    model_config = {"extra": "forbid"}

    @field_validator("name_filter")
    @classmethod
    def strip_empty_names(cls, v: list[str]) -> list[str]:
        """Drop blank entries from the device name filter."""
        return [name for name in v if name.strip()]


class DeviceRates(BaseModel):
    """Per-device rates for one interval."""

    name: str
    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    merge_rate_read: float = Field(ge=0, description="Read requests merged per second")
    merge_rate_write: float = Field(ge=0, description="Write requests merged per second")
    iops_read: float = Field(ge=0, description="Read requests per second")
    iops_write: float = Field(ge=0, description="Write requests per second")
    kbs_read: float = Field(ge=0, description="Kilobytes read per second")
    kbs_write: float = Field(ge=0, description="Kilobytes written per second")
    avg_request_size_kb: float = Field(ge=0, description="Average request size")
    avg_queue_length: float = Field(ge=0, description="Average queue length")
    avg_wait_ms: float = Field(ge=0, description="Average queue + service time")
    avg_service_time_ms: float = Field(ge=0, description="Average service time")
    percent_busy: float = Field(ge=0, le=100, description="Device utilization")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def iops_total(self) -> float:
        """Requests per second in both directions."""
        return self.iops_read + self.iops_write

    @computed_field  # type: ignore[prop-decorator]
    @property
    def kbs_total(self) -> float:
        """Kilobytes per second in both directions."""
        return self.kbs_read + self.kbs_write


class CpuRates(BaseModel):
    """System-wide CPU breakdown for one interval.

    percent_iowait is None when the counter ABI does not account I/O wait.
    """

    percent_user: float = Field(ge=0, le=100)
    percent_system: float = Field(ge=0, le=100)
    percent_iowait: float | None = Field(default=None, ge=0, le=100)
    percent_idle: float = Field(ge=0, le=100)


class RateSample(BaseModel):
    """Everything the renderer needs for one reported interval."""

    elapsed_ms: float = Field(gt=0, description="Interval length derived from CPU ticks")
    devices: list[DeviceRates] = Field(default_factory=list)
    cpu: CpuRates | None = None
