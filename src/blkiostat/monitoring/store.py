"""Two-generation sample store."""

from __future__ import annotations

from blkiostat.monitoring.base import CounterSnapshot, RawDeviceCounters
from blkiostat.monitoring.registry import DeviceRegistry


class SampleStore:
    """Holds the previous and current counter snapshots for the registry.

    Only registered devices are kept. A registered device missing from a new
    read keeps its last known counters, so its next delta is zero.
    """

    def __init__(self, registry: DeviceRegistry) -> None:
        self._registry = registry
        self._previous: CounterSnapshot | None = None
        self._current: CounterSnapshot | None = None

    @property
    def previous(self) -> CounterSnapshot | None:
        return self._previous

    @property
    def current(self) -> CounterSnapshot | None:
        return self._current

    @property
    def has_baseline(self) -> bool:
        """True once two generations are available for delta computation."""
        return self._previous is not None and self._current is not None

    def advance(self, snapshot: CounterSnapshot) -> None:
        """Make the current generation previous and store the new one."""
        last = self._current.devices if self._current is not None else {}
        devices = {}
        for key in self._registry.keys:
            counters = snapshot.devices.get(key)
            if counters is None:
                counters = last.get(key, RawDeviceCounters())
            devices[key] = counters

        self._previous = self._current
        self._current = CounterSnapshot(devices=devices, cpu=snapshot.cpu)
