"""blkiostat - block device and CPU statistics reporter."""

from __future__ import annotations

from blkiostat.core.schemas import CpuRates, DeviceRates, MonitorConfig, RateSample
from blkiostat.monitoring.monitor import IostatMonitor

__version__ = "2.2.0"

__all__ = [
    "CpuRates",
    "DeviceRates",
    "IostatMonitor",
    "MonitorConfig",
    "RateSample",
    "__version__",
]
