"""Delta and rate calculation.

The interval length is derived from the CPU tick counters rather than a
wall clock, so the reported rates stay consistent with the CPU breakdown
even when the polling loop is delayed:

    elapsed_ms = 1000 * (delta user + system + idle + iowait) / ncpu / HZ
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from blkiostat.core.constants import COUNTER_WIDTH_64
from blkiostat.core.errors import ComputeError
from blkiostat.core.schemas import CpuRates, DeviceRates, RateSample
from blkiostat.monitoring.base import (
    CounterSnapshot,
    DeviceIdentity,
    RawCpuCounters,
    RawDeviceCounters,
)
from blkiostat.monitoring.io_utils import (
    average_per_io,
    clamp_percent,
    counter_delta,
    per_second,
    sectors_to_kb,
)


def system_clock_ticks() -> int:
    """Return the scheduler tick rate (USER_HZ) of this system."""
    return os.sysconf("SC_CLK_TCK")


def device_delta(current: RawDeviceCounters, previous: RawDeviceCounters) -> RawDeviceCounters:
    """Per-field interval delta of two device counter records."""
    return RawDeviceCounters(
        read_ios=counter_delta(current.read_ios, previous.read_ios),
        read_merges=counter_delta(current.read_merges, previous.read_merges),
        read_sectors=counter_delta(current.read_sectors, previous.read_sectors, COUNTER_WIDTH_64),
        read_ticks_ms=counter_delta(current.read_ticks_ms, previous.read_ticks_ms),
        write_ios=counter_delta(current.write_ios, previous.write_ios),
        write_merges=counter_delta(current.write_merges, previous.write_merges),
        write_sectors=counter_delta(
            current.write_sectors, previous.write_sectors, COUNTER_WIDTH_64
        ),
        write_ticks_ms=counter_delta(current.write_ticks_ms, previous.write_ticks_ms),
        io_ticks_ms=counter_delta(current.io_ticks_ms, previous.io_ticks_ms),
        queue_time_ms=counter_delta(current.queue_time_ms, previous.queue_time_ms),
    )


def cpu_delta(current: RawCpuCounters, previous: RawCpuCounters) -> RawCpuCounters:
    """Per-category interval delta of two CPU counter records."""
    return RawCpuCounters(
        user_ticks=counter_delta(current.user_ticks, previous.user_ticks, COUNTER_WIDTH_64),
        system_ticks=counter_delta(current.system_ticks, previous.system_ticks, COUNTER_WIDTH_64),
        idle_ticks=counter_delta(current.idle_ticks, previous.idle_ticks, COUNTER_WIDTH_64),
        iowait_ticks=counter_delta(current.iowait_ticks, previous.iowait_ticks, COUNTER_WIDTH_64),
    )


class RateCalculator:
    """Converts two counter generations into per-interval rates.

    The calculator is stateless apart from its construction parameters, so
    identical inputs always produce identical results.
    """

    def __init__(
        self,
        cpu_count: int,
        clock_ticks_per_sec: int | None = None,
        include_iowait: bool = True,
    ) -> None:
        """Initialize the calculator.

        Args:
            cpu_count: Number of processors the CPU ticks are summed over
            clock_ticks_per_sec: Tick rate of the CPU counters, None to ask the OS
            include_iowait: Whether the counter ABI accounts I/O wait
        """
        self.cpu_count = cpu_count
        self.clock_ticks_per_sec = clock_ticks_per_sec or system_clock_ticks()
        self.include_iowait = include_iowait

    def elapsed_ms(self, previous: RawCpuCounters, current: RawCpuCounters) -> float:
        """Interval length in milliseconds derived from the CPU tick delta.

        Raises:
            ComputeError: If the CPU count is not positive or no ticks elapsed
        """
        if self.cpu_count <= 0:
            raise ComputeError(f"Invalid CPU count: {self.cpu_count}")

        total_ticks = cpu_delta(current, previous).total_ticks
        elapsed = 1000.0 * total_ticks / self.cpu_count / self.clock_ticks_per_sec
        if elapsed <= 0:
            raise ComputeError(f"Non-positive elapsed time: {elapsed} ms")
        return elapsed

    def device_rates(
        self,
        device: DeviceIdentity,
        previous: RawDeviceCounters,
        current: RawDeviceCounters,
        elapsed_ms: float,
    ) -> DeviceRates:
        """Rates for one device over an interval of elapsed_ms.

        Raises:
            ComputeError: If elapsed_ms is not positive
        """
        if elapsed_ms <= 0:
            raise ComputeError(f"Non-positive elapsed time: {elapsed_ms} ms")

        d = device_delta(current, previous)
        n_ios = d.read_ios + d.write_ios
        n_ticks = d.read_ticks_ms + d.write_ticks_ms
        n_kbytes = sectors_to_kb(d.read_sectors + d.write_sectors)

        return DeviceRates(
            name=device.name,
            major=device.major,
            minor=device.minor,
            merge_rate_read=per_second(d.read_merges, elapsed_ms),
            merge_rate_write=per_second(d.write_merges, elapsed_ms),
            iops_read=per_second(d.read_ios, elapsed_ms),
            iops_write=per_second(d.write_ios, elapsed_ms),
            kbs_read=per_second(sectors_to_kb(d.read_sectors), elapsed_ms),
            kbs_write=per_second(sectors_to_kb(d.write_sectors), elapsed_ms),
            avg_request_size_kb=average_per_io(n_kbytes, n_ios),
            avg_queue_length=d.queue_time_ms / elapsed_ms,
            avg_wait_ms=average_per_io(n_ticks, n_ios),
            avg_service_time_ms=average_per_io(d.io_ticks_ms, n_ios),
            percent_busy=clamp_percent(100.0 * d.io_ticks_ms / elapsed_ms),
        )

    def cpu_rates(self, previous: RawCpuCounters, current: RawCpuCounters) -> CpuRates:
        """CPU breakdown over the interval; the four shares sum to 100.

        Raises:
            ComputeError: If no ticks elapsed
        """
        d = cpu_delta(current, previous)
        total = d.total_ticks
        if total <= 0:
            raise ComputeError("No CPU ticks elapsed")

        return CpuRates(
            percent_user=100 * d.user_ticks / total,
            percent_system=100 * d.system_ticks / total,
            percent_iowait=100 * d.iowait_ticks / total if self.include_iowait else None,
            percent_idle=100 * d.idle_ticks / total,
        )

    def compute(
        self,
        previous: CounterSnapshot,
        current: CounterSnapshot,
        devices: Iterable[DeviceIdentity],
        include_cpu: bool = True,
    ) -> RateSample:
        """Compute the full rate sample for the given devices, in order.

        Devices missing from a snapshot are treated as all-zero counters.

        Raises:
            ComputeError: If the interval length is not positive
        """
        elapsed = self.elapsed_ms(previous.cpu, current.cpu)
        empty = RawDeviceCounters()
        rates = [
            self.device_rates(
                device,
                previous.devices.get(device.key, empty),
                current.devices.get(device.key, empty),
                elapsed,
            )
            for device in devices
        ]
        cpu = self.cpu_rates(previous.cpu, current.cpu) if include_cpu else None
        return RateSample(elapsed_ms=elapsed, devices=rates, cpu=cpu)
