"""Monitoring module - counter collection and rate computation.

Provides:
- CounterSource implementations for /proc/diskstats and /proc/partitions
- DeviceRegistry: the monitored device set
- SampleStore: previous/current counter generations
- RateCalculator: deltas and normalized rates
- IostatMonitor: the polling loop

Shared utilities:
- io_utils: Common I/O metric calculation helpers
"""

from __future__ import annotations

from blkiostat.monitoring.base import (
    CounterSnapshot,
    CounterSource,
    DeviceIdentity,
    DiscoveryRecord,
    RawCpuCounters,
    RawDeviceCounters,
)
from blkiostat.monitoring.calculator import RateCalculator
from blkiostat.monitoring.io_utils import (
    average_per_io,
    clamp_percent,
    counter_delta,
    per_second,
    sectors_to_kb,
)
from blkiostat.monitoring.monitor import IostatMonitor
from blkiostat.monitoring.registry import DeviceRegistry, VisibilityPolicy
from blkiostat.monitoring.sources import (
    LegacyPartitionsSource,
    ModernDiskstatsSource,
    count_cpus,
    select_source,
)
from blkiostat.monitoring.store import SampleStore

__all__ = [
    "CounterSnapshot",
    "CounterSource",
    "DeviceIdentity",
    "DeviceRegistry",
    "DiscoveryRecord",
    "IostatMonitor",
    "LegacyPartitionsSource",
    "ModernDiskstatsSource",
    "RateCalculator",
    "RawCpuCounters",
    "RawDeviceCounters",
    "SampleStore",
    "VisibilityPolicy",
    "average_per_io",
    "clamp_percent",
    "count_cpus",
    "counter_delta",
    "per_second",
    "sectors_to_kb",
    "select_source",
]
