"""Counter records and the abstract counter source.

All counter sources implement CounterSource so that the monitor can work
with either kernel ABI through one interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field

DeviceKey = tuple[int, int]


@dataclass(frozen=True)
class DeviceIdentity:
    """A monitored block device or partition."""

    major: int
    minor: int
    name: str

    @property
    def key(self) -> DeviceKey:
        return (self.major, self.minor)


@dataclass(frozen=True)
class DiscoveryRecord:
    """A device candidate seen while scanning the counter file."""

    major: int
    minor: int
    name: str
    read_count_hint: int  # Completed reads; 0 means the device never saw I/O


@dataclass(frozen=True)
class RawDeviceCounters:
    """Cumulative block-layer counters of one device."""

    read_ios: int = 0
    read_merges: int = 0
    read_sectors: int = 0  # 64-bit
    read_ticks_ms: int = 0
    write_ios: int = 0
    write_merges: int = 0
    write_sectors: int = 0  # 64-bit
    write_ticks_ms: int = 0
    io_ticks_ms: int = 0  # Time with at least one request in flight
    queue_time_ms: int = 0  # Weighted time in queue (aveq)


@dataclass(frozen=True)
class RawCpuCounters:
    """Cumulative system-wide CPU ticks, summed across all CPUs."""

    user_ticks: int = 0  # includes nice
    system_ticks: int = 0  # includes irq + softirq when reported
    idle_ticks: int = 0
    iowait_ticks: int = 0

    @property
    def total_ticks(self) -> int:
        return self.user_ticks + self.system_ticks + self.idle_ticks + self.iowait_ticks


@dataclass
class CounterSnapshot:
    """Result of one full read pass over the counter sources."""

    devices: dict[DeviceKey, RawDeviceCounters] = field(default_factory=dict)
    cpu: RawCpuCounters = field(default_factory=RawCpuCounters)


class CounterSource(ABC):
    """Abstract base class for kernel counter sources.

    Implementations:
    - ModernDiskstatsSource: /proc/diskstats
    - LegacyPartitionsSource: /proc/partitions with sard statistics
    """

    @abstractmethod
    def discovery_records(self) -> Iterator[DiscoveryRecord]:
        """Yield device candidates for registry discovery.

        Raises:
            ConfigError: If the discovery source cannot be read
        """

    @abstractmethod
    def read_all(self) -> CounterSnapshot:
        """Re-read all counters from the start of the sources.

        Raises:
            SourceReadError: If a counter source cannot be read
        """

    @property
    @abstractmethod
    def reports_iowait(self) -> bool:
        """Whether the CPU counters of this ABI account I/O wait."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this source."""
