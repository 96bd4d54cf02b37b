"""Shared constants for blkiostat.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

# Block layer accounting unit in bytes
SECTOR_SIZE = 512

# Default soft limit on the number of monitored devices
DEFAULT_REGISTRY_CAPACITY = 64
# Longest accepted sampling interval (one day)
MAX_INTERVAL_SECONDS = 86400

# Device names longer than this are not recognised in the counter files
MAX_DEVICE_NAME_LEN = 31

# Header lines are repeated every N report lines in basic/utilization mode
HEADER_REPEAT_LINES = 21

# Counter widths used for modular delta computation
COUNTER_WIDTH_32 = 1 << 32
COUNTER_WIDTH_64 = 1 << 64

# Historically reserved IDE disk majors (IDE0..IDE9). Partition bits: minor & 0x3F
IDE_DISK_MAJORS = frozenset({3, 22, 33, 34, 56, 57, 88, 89, 90, 91})
IDE_PARTITION_MASK = 0x3F

# SCSI disk majors: SCSI_DISK0, SCSI_DISK1..7, SCSI_DISK8..15. Partition bits: minor & 0x0F
SCSI_DISK_MAJORS = frozenset({8, *range(65, 72), *range(128, 136)})
SCSI_PARTITION_MASK = 0x0F

# File names under the proc root
DISKSTATS_FILE = "diskstats"
PARTITIONS_FILE = "partitions"
STAT_FILE = "stat"
CPUINFO_FILE = "cpuinfo"
