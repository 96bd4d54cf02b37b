"""Tests for DeviceRegistry and VisibilityPolicy."""

import pytest

from blkiostat.core.errors import ConfigError
from blkiostat.monitoring.base import DeviceIdentity, DiscoveryRecord
from blkiostat.monitoring.registry import DeviceRegistry, VisibilityPolicy


def records(*fields: tuple[int, int, str, int]) -> list[DiscoveryRecord]:
    return [DiscoveryRecord(*f) for f in fields]


class TestVisibilityPolicy:
    """Tests for the whole-device/partition visibility rules."""

    def test_default_shows_whole_devices_only(self) -> None:
        """Test the default of whole disks only."""
        policy = VisibilityPolicy()
        assert policy.printable(8, 0) is True  # sda
        assert policy.printable(8, 1) is False  # sda1
        assert policy.printable(3, 0) is True  # hda
        assert policy.printable(3, 1) is False  # hda1

    def test_scsi_partition_mask(self) -> None:
        policy = VisibilityPolicy()
        assert policy.printable(8, 16) is True  # sdb
        assert policy.printable(8, 17) is False  # sdb1
        assert policy.printable(65, 0) is True
        assert policy.printable(135, 15) is False

    def test_ide_partition_mask(self) -> None:
        policy = VisibilityPolicy()
        assert policy.printable(3, 64) is True  # hdb
        assert policy.printable(3, 65) is False  # hdb1
        assert policy.printable(91, 63) is False

    def test_partitions_only(self) -> None:
        policy = VisibilityPolicy(show_whole_device=False, show_partitions=True)
        assert policy.printable(8, 0) is False
        assert policy.printable(8, 1) is True

    def test_whole_devices_and_partitions(self) -> None:
        policy = VisibilityPolicy(show_whole_device=True, show_partitions=True)
        assert policy.printable(8, 0) is True
        assert policy.printable(8, 1) is True

    @pytest.mark.parametrize("major", [7, 9, 179, 253, 259])
    def test_unknown_classes_always_visible(self, major: int) -> None:
        policy = VisibilityPolicy(show_whole_device=False, show_partitions=False)
        assert policy.printable(major, 0) is True
        assert policy.printable(major, 1) is True


class TestDeviceRegistryDiscover:
    """Tests for DeviceRegistry.discover."""

    def test_skips_idle_and_hidden_devices(self) -> None:
        """Test that devices without reads and partitions are skipped."""
        registry = DeviceRegistry.discover(
            records(
                (8, 0, "sda", 100),
                (8, 1, "sda1", 90),
                (8, 16, "sdb", 0),
                (253, 0, "dm-0", 5),
            )
        )
        assert registry.names == ["sda", "dm-0"]
        assert registry.keys == [(8, 0), (253, 0)]

    def test_deduplicates_by_major_minor(self) -> None:
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 100), (8, 0, "sda", 100), (8, 0, "other", 1))
        )
        assert list(registry) == [DeviceIdentity(8, 0, "sda")]

    def test_capacity_truncates_silently(self) -> None:
        """Test that extra devices are dropped without an error."""
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 16, "sdb", 1), (8, 32, "sdc", 1)),
            capacity=2,
        )
        assert registry.names == ["sda", "sdb"]

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ConfigError):
            DeviceRegistry.discover(records((8, 0, "sda", 1)), capacity=0)

    def test_name_filter_order(self) -> None:
        """Registration follows the filter order, not the file order."""
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 16, "sdb", 1), (8, 32, "sdc", 1)),
            name_filter=["sdc", "sda"],
        )
        assert registry.names == ["sdc", "sda"]

    def test_name_filter_ignores_activity_and_visibility(self) -> None:
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 1, "sda1", 0)),
            name_filter=["sda1"],
        )
        assert registry.names == ["sda1"]

    def test_name_filter_exact_match(self) -> None:
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 1, "sda1", 1)),
            name_filter=["sd"],
        )
        assert len(registry) == 0

    def test_name_filter_with_capacity(self) -> None:
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 16, "sdb", 1), (8, 32, "sdc", 1)),
            name_filter=["sdc", "sdb", "sda"],
            capacity=2,
        )
        assert registry.names == ["sdc", "sdb"]

    def test_partitions_policy(self) -> None:
        registry = DeviceRegistry.discover(
            records((8, 0, "sda", 1), (8, 1, "sda1", 1)),
            visibility=VisibilityPolicy(show_whole_device=False, show_partitions=True),
        )
        assert registry.names == ["sda1"]

    def test_contains(self) -> None:
        registry = DeviceRegistry.discover(records((8, 0, "sda", 1)))
        assert (8, 0) in registry
        assert (8, 16) not in registry
