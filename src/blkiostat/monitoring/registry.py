"""Device registry: the ordered set of monitored devices.

The registry is built once at startup from the counter source's discovery
records and never changes afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from blkiostat.core.constants import (
    IDE_DISK_MAJORS,
    IDE_PARTITION_MASK,
    SCSI_DISK_MAJORS,
    SCSI_PARTITION_MASK,
)
from blkiostat.core.errors import ConfigError
from blkiostat.monitoring.base import DeviceIdentity, DeviceKey, DiscoveryRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibilityPolicy:
    """Decides which whole devices and partitions are shown by default."""

    show_whole_device: bool = True
    show_partitions: bool = False

    def printable(self, major: int, minor: int) -> bool:
        """Return True if the device should be monitored.

        Only the IDE and SCSI disk classes have a known partition numbering
        scheme; anything else (virtio, nvme, dm, ...) is always shown.
        """
        if major in IDE_DISK_MAJORS:
            partition_bits = minor & IDE_PARTITION_MASK
        elif major in SCSI_DISK_MAJORS:
            partition_bits = minor & SCSI_PARTITION_MASK
        else:
            return True

        if partition_bits:
            return self.show_partitions
        return self.show_whole_device


class DeviceRegistry:
    """Ordered, deduplicated collection of DeviceIdentity."""

    def __init__(self, devices: Iterable[DeviceIdentity] = ()) -> None:
        self._devices: list[DeviceIdentity] = []
        self._keys: set[DeviceKey] = set()
        for device in devices:
            self._add(device)

    @classmethod
    def discover(
        cls,
        records: Iterable[DiscoveryRecord],
        name_filter: list[str] | None = None,
        capacity: int = 64,
        visibility: VisibilityPolicy | None = None,
    ) -> DeviceRegistry:
        """Build the registry from discovery records.

        Args:
            records: Candidates from the counter source, in file order
            name_filter: Explicit device names; when non-empty only these are
                registered, in filter order
            capacity: Maximum number of devices; extra candidates are dropped
            visibility: Default-mode visibility policy

        Returns:
            Populated DeviceRegistry

        Raises:
            ConfigError: If capacity is not positive
        """
        if capacity < 1:
            raise ConfigError(f"Registry capacity must be at least 1, got {capacity}")

        visibility = visibility or VisibilityPolicy()
        if name_filter:
            candidates = cls._select_by_name(records, name_filter)
        else:
            candidates = (
                r
                for r in records
                if r.read_count_hint > 0 and visibility.printable(r.major, r.minor)
            )

        registry = cls()
        for record in candidates:
            identity = DeviceIdentity(record.major, record.minor, record.name)
            if identity.key in registry._keys:
                continue
            if len(registry) >= capacity:
                logger.debug(f"Registry full ({capacity}), dropping {record.name}")
                continue
            registry._add(identity)

        logger.debug(f"Registered devices: {registry.names}")
        return registry

    @staticmethod
    def _select_by_name(
        records: Iterable[DiscoveryRecord], name_filter: list[str]
    ) -> list[DiscoveryRecord]:
        position = {}
        for index, name in enumerate(name_filter):
            position.setdefault(name, index)

        matched = [r for r in records if r.name in position]
        # Stable sort keeps file order among records with the same name
        matched.sort(key=lambda r: position[r.name])
        return matched

    def _add(self, device: DeviceIdentity) -> None:
        self._devices.append(device)
        self._keys.add(device.key)

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[DeviceIdentity]:
        return iter(self._devices)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._devices]

    @property
    def keys(self) -> list[DeviceKey]:
        return [d.key for d in self._devices]
