"""Polling loop tying the engine together.

Each tick re-reads the counter source, advances the sample store and, once a
baseline exists, computes a RateSample. The very first tick only establishes
the baseline.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from blkiostat.core.errors import ComputeError
from blkiostat.core.schemas import MonitorConfig, RateSample
from blkiostat.monitoring.base import CounterSource
from blkiostat.monitoring.calculator import RateCalculator
from blkiostat.monitoring.registry import DeviceRegistry, VisibilityPolicy
from blkiostat.monitoring.sources import count_cpus, select_source
from blkiostat.monitoring.store import SampleStore

logger = logging.getLogger(__name__)


class IostatMonitor:
    """Single-threaded sampler of block device and CPU counters."""

    def __init__(
        self,
        config: MonitorConfig,
        source: CounterSource | None = None,
        cpu_count: int | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            config: Monitoring configuration
            source: Counter source, selected from config.proc_root when None
            cpu_count: Processor count, read from cpuinfo when None
            sleep: Function used to wait between ticks, time.sleep when None
        """
        self.config = config
        self._source = source
        self._cpu_count = cpu_count
        self._sleep = sleep or time.sleep
        self._registry: DeviceRegistry | None = None
        self._store: SampleStore | None = None
        self._calculator: RateCalculator | None = None

    @property
    def source(self) -> CounterSource:
        if self._source is None:
            raise RuntimeError("IostatMonitor not started")
        return self._source

    @property
    def registry(self) -> DeviceRegistry:
        if self._registry is None:
            raise RuntimeError("IostatMonitor not started")
        return self._registry

    @property
    def started(self) -> bool:
        return self._registry is not None

    def start(self) -> DeviceRegistry:
        """Select the counter source and discover the monitored devices.

        Raises:
            ConfigError: If the sources are unusable or the configuration is invalid
        """
        if self._source is None:
            self._source = select_source(self.config.proc_root)
        if self._cpu_count is None:
            self._cpu_count = count_cpus(self.config.proc_root)

        visibility = VisibilityPolicy(
            show_whole_device=self.config.show_whole_device,
            show_partitions=self.config.show_partitions,
        )
        self._registry = DeviceRegistry.discover(
            self._source.discovery_records(),
            name_filter=self.config.name_filter,
            capacity=self.config.registry_capacity,
            visibility=visibility,
        )
        if not self.config.name_filter and len(self._registry) == 0:
            logger.warning("No active block devices found")

        self._store = SampleStore(self._registry)
        self._calculator = RateCalculator(
            cpu_count=self._cpu_count,
            clock_ticks_per_sec=self.config.clock_ticks_per_sec,
            include_iowait=self._source.reports_iowait,
        )
        logger.info(
            f"Monitoring {len(self._registry)} device(s) via {self._source.name}, "
            f"{self._cpu_count} CPU(s)"
        )
        return self._registry

    def tick(self) -> RateSample | None:
        """Take one sample.

        Returns:
            RateSample for the interval since the previous tick, or None on the
            baseline tick and on intervals whose rates cannot be computed

        Raises:
            SourceReadError: If the counter source became unreadable
        """
        if self._store is None or self._calculator is None:
            self.start()
        assert self._store is not None and self._calculator is not None

        snapshot = self.source.read_all()
        self._store.advance(snapshot)
        if not self._store.has_baseline:
            logger.debug("Baseline sample taken")
            return None

        assert self._store.previous is not None and self._store.current is not None
        try:
            return self._calculator.compute(
                self._store.previous,
                self._store.current,
                self.registry,
                include_cpu=self.config.cpu_reporting_enabled,
            )
        except ComputeError as e:
            logger.warning(f"Skipping interval: {e}")
            return None

    def run(
        self,
        on_sample: Callable[[RateSample], None],
        on_baseline: Callable[[], None] | None = None,
    ) -> int:
        """Sample until the configured count is reached.

        Args:
            on_sample: Called with each computed RateSample
            on_baseline: Called once after the baseline tick

        Returns:
            Number of intervals sampled after the baseline
        """
        if not self.started:
            self.start()

        self.tick()
        if on_baseline is not None:
            on_baseline()

        intervals = 0
        while self.config.count is None or intervals < self.config.count:
            self._sleep(self.config.interval_seconds)
            sample = self.tick()
            intervals += 1
            if sample is not None:
                on_sample(sample)
        return intervals
