"""Tests for SampleStore."""

from blkiostat.monitoring.base import (
    CounterSnapshot,
    DeviceIdentity,
    RawCpuCounters,
    RawDeviceCounters,
)
from blkiostat.monitoring.registry import DeviceRegistry
from blkiostat.monitoring.store import SampleStore


def make_registry() -> DeviceRegistry:
    return DeviceRegistry([DeviceIdentity(8, 0, "sda"), DeviceIdentity(8, 16, "sdb")])


class TestSampleStore:
    """Tests for two-generation bookkeeping."""

    def test_no_baseline_until_two_generations(self) -> None:
        """Test that a baseline needs two snapshots."""
        store = SampleStore(make_registry())
        assert store.has_baseline is False
        store.advance(CounterSnapshot())
        assert store.has_baseline is False
        assert store.previous is None
        store.advance(CounterSnapshot())
        assert store.has_baseline is True

    def test_advance_swaps_generations(self) -> None:
        store = SampleStore(make_registry())
        store.advance(CounterSnapshot(cpu=RawCpuCounters(user_ticks=1)))
        first = store.current
        store.advance(CounterSnapshot(cpu=RawCpuCounters(user_ticks=2)))
        assert store.previous is first
        assert store.current is not None
        assert store.current.cpu.user_ticks == 2

    def test_unregistered_devices_discarded(self) -> None:
        store = SampleStore(make_registry())
        store.advance(
            CounterSnapshot(
                devices={
                    (8, 0): RawDeviceCounters(read_ios=1),
                    (253, 0): RawDeviceCounters(read_ios=5),
                }
            )
        )
        assert store.current is not None
        assert set(store.current.devices) == {(8, 0), (8, 16)}

    def test_missing_device_carries_last_value(self) -> None:
        """Test that a device missing from a read keeps its counters."""
        store = SampleStore(make_registry())
        store.advance(CounterSnapshot(devices={(8, 0): RawDeviceCounters(read_ios=10)}))
        store.advance(CounterSnapshot(devices={}))
        assert store.current is not None
        assert store.current.devices[(8, 0)] == RawDeviceCounters(read_ios=10)

    def test_never_seen_device_is_zero(self) -> None:
        store = SampleStore(make_registry())
        store.advance(CounterSnapshot(devices={(8, 0): RawDeviceCounters(read_ios=10)}))
        assert store.current is not None
        assert store.current.devices[(8, 16)] == RawDeviceCounters()
