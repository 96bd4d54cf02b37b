"""Counter sources for the two kernel block statistics ABIs.

Modern kernels expose per-device counters in /proc/diskstats:

    major minor name rd_ios rd_merges rd_sectors rd_ticks
                     wr_ios wr_merges wr_sectors wr_ticks
                     in_flight io_ticks aveq [discard/flush fields ...]

Early 2.6 kernels print partitions in a reduced form with only four values:

    major minor name rd_ios rd_sectors wr_ios wr_sectors

Legacy kernels with the sard patch extend /proc/partitions instead:

    major minor #blocks name rd_ios rd_merges rd_sectors rd_ticks
                             wr_ios wr_merges wr_sectors wr_ticks
                             in_flight io_ticks aveq

CPU ticks always come from the aggregate "cpu " line of /proc/stat.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Iterator
from pathlib import Path

from blkiostat.core.constants import (
    CPUINFO_FILE,
    DISKSTATS_FILE,
    MAX_DEVICE_NAME_LEN,
    PARTITIONS_FILE,
    STAT_FILE,
)
from blkiostat.core.errors import ConfigError, SourceReadError
from blkiostat.monitoring.base import (
    CounterSnapshot,
    CounterSource,
    DeviceKey,
    DiscoveryRecord,
    RawCpuCounters,
    RawDeviceCounters,
)

logger = logging.getLogger(__name__)

# Number of values after the device name in a full counter record
# (the trailing in_flight, io_ticks, aveq included)
FULL_RECORD_FIELDS = 11
# Number of values after the device name in a reduced partition record
PARTITION_RECORD_FIELDS = 4

CPU_LINE_PREFIX = "cpu "
CPUINFO_PROCESSOR_PREFIX = "processor\t:"


def leading_uints(tokens: list[str]) -> list[int]:
    """Parse unsigned integers from the start of tokens, stopping at the first non-number."""
    values: list[int] = []
    for token in tokens:
        if not (token.isascii() and token.isdigit()):
            break
        values.append(int(token))
    return values


def parse_full_record(values: list[int]) -> RawDeviceCounters:
    """Map the full 11-value layout onto RawDeviceCounters (in_flight is dropped)."""
    return RawDeviceCounters(
        read_ios=values[0],
        read_merges=values[1],
        read_sectors=values[2],
        read_ticks_ms=values[3],
        write_ios=values[4],
        write_merges=values[5],
        write_sectors=values[6],
        write_ticks_ms=values[7],
        io_ticks_ms=values[9],
        queue_time_ms=values[10],
    )


def parse_partition_record(values: list[int]) -> RawDeviceCounters:
    """Remap a reduced partition record.

    The values land in the slots of the full layout, so the sector totals are
    taken from the rd_merges and rd_ticks positions. Only transfer totals are
    available for these partitions; every other counter reads as zero.
    """
    return RawDeviceCounters(read_sectors=values[1], write_sectors=values[3])


def parse_cpu_line(line: str) -> RawCpuCounters | None:
    """Parse the aggregate CPU line of /proc/stat.

    Returns None if the line is not the aggregate CPU line or is too short.
    nice is folded into user; irq and softirq are folded into system when
    the kernel reports them. Without an iowait column iowait is zero.
    """
    if not line.startswith(CPU_LINE_PREFIX):
        return None

    values = leading_uints(line.split()[1:])
    if len(values) < 4:
        return None

    user, nice, system, idle = values[:4]
    iowait = values[4] if len(values) >= 5 else 0
    if len(values) >= 7:
        system += values[5] + values[6]

    return RawCpuCounters(
        user_ticks=user + nice,
        system_ticks=system,
        idle_ticks=idle,
        iowait_ticks=iowait,
    )


def count_cpus(proc_root: Path) -> int:
    """Count processors listed in cpuinfo.

    Raises:
        ConfigError: If cpuinfo cannot be read or lists no processors
    """
    cpuinfo = proc_root / CPUINFO_FILE
    try:
        text = cpuinfo.read_text()
    except OSError as e:
        raise ConfigError(f"Can't open {cpuinfo}: {e}") from e

    ncpu = sum(1 for line in text.splitlines() if line.startswith(CPUINFO_PROCESSOR_PREFIX))
    if ncpu == 0:
        raise ConfigError(f"Error parsing {cpuinfo}")
    logger.debug(f"Found {ncpu} processors in {cpuinfo}")
    return ncpu


def _is_readable(path: Path) -> bool:
    try:
        with open(path, encoding="ascii", errors="replace"):
            return True
    except OSError:
        return False


class ProcfsCounterSource(CounterSource):
    """Shared file handling for the procfs based sources."""

    BLOCK_FILE: str = ""

    def __init__(self, proc_root: Path | str = "/proc") -> None:
        self._proc_root = Path(proc_root)
        self._block_path = self._proc_root / self.BLOCK_FILE
        self._stat_path = self._proc_root / STAT_FILE

    @property
    def block_path(self) -> Path:
        return self._block_path

    @property
    def stat_path(self) -> Path:
        return self._stat_path

    def discovery_records(self) -> Iterator[DiscoveryRecord]:
        try:
            text = self._block_path.read_text()
        except OSError as e:
            raise ConfigError(f"Can't read {self._block_path}: {e}") from e

        for line in text.splitlines():
            record = self.parse_discovery_line(line)
            if record is not None:
                yield record

    def read_all(self) -> CounterSnapshot:
        snapshot = CounterSnapshot(cpu=self.read_cpu())
        for line in self._read_lines(self._block_path):
            parsed = self.parse_counter_line(line)
            if parsed is not None:
                key, counters = parsed
                snapshot.devices[key] = counters
        return snapshot

    def read_cpu(self) -> RawCpuCounters:
        """Read the aggregate CPU counters from stat.

        Raises:
            SourceReadError: If stat is unreadable or has no usable CPU line
        """
        for line in self._read_lines(self._stat_path):
            if line.startswith(CPU_LINE_PREFIX):
                cpu = parse_cpu_line(line)
                if cpu is None:
                    raise SourceReadError(f"Malformed CPU line in {self._stat_path}: {line!r}")
                return cpu
        raise SourceReadError(f"No CPU line found in {self._stat_path}")

    def _read_lines(self, path: Path) -> list[str]:
        try:
            return path.read_text().splitlines()
        except OSError as e:
            raise SourceReadError(f"Can't read {path}: {e}") from e

    @abstractmethod
    def parse_discovery_line(self, line: str) -> DiscoveryRecord | None:
        """Parse one line for discovery, None if it does not match."""

    @abstractmethod
    def parse_counter_line(self, line: str) -> tuple[DeviceKey, RawDeviceCounters] | None:
        """Parse one line for sampling, None if it does not match."""


class ModernDiskstatsSource(ProcfsCounterSource):
    """Counters from /proc/diskstats."""

    BLOCK_FILE = DISKSTATS_FILE

    @property
    def name(self) -> str:
        return "diskstats"

    @property
    def reports_iowait(self) -> bool:
        return True

    def parse_discovery_line(self, line: str) -> DiscoveryRecord | None:
        tokens = line.split()
        if len(tokens) < 4:
            return None
        ids = leading_uints(tokens[:2])
        reads = leading_uints(tokens[3:4])
        name = tokens[2]
        if len(ids) != 2 or not reads or len(name) > MAX_DEVICE_NAME_LEN:
            return None
        return DiscoveryRecord(ids[0], ids[1], name, reads[0])

    def parse_counter_line(self, line: str) -> tuple[DeviceKey, RawDeviceCounters] | None:
        tokens = line.split()
        if len(tokens) < 3:
            return None
        ids = leading_uints(tokens[:2])
        if len(ids) != 2:
            return None

        values = leading_uints(tokens[3:])
        if len(values) >= FULL_RECORD_FIELDS:
            return (ids[0], ids[1]), parse_full_record(values)
        if len(values) == PARTITION_RECORD_FIELDS:
            return (ids[0], ids[1]), parse_partition_record(values)
        return None


class LegacyPartitionsSource(ProcfsCounterSource):
    """Counters from a sard-patched /proc/partitions."""

    BLOCK_FILE = PARTITIONS_FILE

    @property
    def name(self) -> str:
        return "partitions"

    @property
    def reports_iowait(self) -> bool:
        return False

    def parse_discovery_line(self, line: str) -> DiscoveryRecord | None:
        tokens = line.split()
        if len(tokens) < 5:
            return None
        ids = leading_uints(tokens[:3])
        reads = leading_uints(tokens[4:5])
        name = tokens[3]
        if len(ids) != 3 or not reads or len(name) > MAX_DEVICE_NAME_LEN:
            return None
        return DiscoveryRecord(ids[0], ids[1], name, reads[0])

    def parse_counter_line(self, line: str) -> tuple[DeviceKey, RawDeviceCounters] | None:
        tokens = line.split()
        if len(tokens) < 4:
            return None
        ids = leading_uints(tokens[:3])
        if len(ids) != 3:
            return None

        values = leading_uints(tokens[4:])
        if len(values) < FULL_RECORD_FIELDS:
            return None
        return (ids[0], ids[1]), parse_full_record(values)


def select_source(proc_root: Path | str = "/proc") -> ProcfsCounterSource:
    """Pick the counter source for this system.

    diskstats is preferred; partitions is the fallback for legacy kernels.

    Raises:
        ConfigError: If neither block counter file nor stat is readable
    """
    proc_root = Path(proc_root)
    source: ProcfsCounterSource
    if _is_readable(proc_root / DISKSTATS_FILE):
        source = ModernDiskstatsSource(proc_root)
    elif _is_readable(proc_root / PARTITIONS_FILE):
        source = LegacyPartitionsSource(proc_root)
    else:
        raise ConfigError("Can't get I/O statistics on this system")

    if not _is_readable(source.stat_path):
        raise ConfigError(f"Can't open {source.stat_path}")

    logger.debug(f"Using {source.name} counter source under {proc_root}")
    return source
