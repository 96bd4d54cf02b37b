"""Shared fixtures: fake proc trees for both counter ABIs."""

from __future__ import annotations

from pathlib import Path

import pytest

CPUINFO_TWO_CPUS = """\
processor\t: 0
vendor_id\t: GenuineIntel
model name\t: Test CPU

processor\t: 1
vendor_id\t: GenuineIntel
model name\t: Test CPU
"""

DISKSTATS_T0 = """\
   7       0 loop0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0
   8       0 sda 1000 100 20000 3000 500 50 10000 2000 0 4000 5000 0 0 0 0 0 0
   8       1 sda1 900 90 18000 2700 400 40 8000 1600 0 3500 4300 0 0 0 0 0 0
   8      16 sdb 0 0 0 0 0 0 0 0 0 0 0
 253       0 dm-0 20 0 160 4 0 0 0 0 0 4 4
"""

DISKSTATS_T1 = """\
   7       0 loop0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0 0
   8       0 sda 1100 110 22000 3200 550 60 11000 2100 1 7000 6000 0 0 0 0 0 0
   8       1 sda1 990 99 19800 2900 440 44 8800 1700 0 5000 4800 0 0 0 0 0 0
   8      16 sdb 0 0 0 0 0 0 0 0 0 0 0
 253       0 dm-0 30 0 240 6 0 0 0 0 0 6 6
"""

# 2 CPUs at 100 Hz: 400 ticks in total is one second
STAT_T0 = """\
cpu  1000 100 500 8000 400 0 0 0 0 0
cpu0 500 50 250 4000 200 0 0 0 0 0
cpu1 500 50 250 4000 200 0 0 0 0 0
intr 12345
ctxt 67890
"""

STAT_T1 = """\
cpu  1080 120 560 8200 440 0 0 0 0 0
cpu0 540 60 280 4100 220 0 0 0 0 0
cpu1 540 60 280 4100 220 0 0 0 0 0
intr 12400
ctxt 68000
"""

PARTITIONS_T0 = """\
major minor  #blocks  name     rio rmerge rsect ruse wio wmerge wsect wuse running use aveq

   3     0   19535040 hda 1000 20 8000 300 500 10 4000 200 0 450 600
   3     1    1048576 hda1 10 0 80 3 5 0 40 2 0 5 5
  22     0    9767520 hdc 0 0 0 0 0 0 0 0 0 0 0
"""

PARTITIONS_T1 = """\
major minor  #blocks  name     rio rmerge rsect ruse wio wmerge wsect wuse running use aveq

   3     0   19535040 hda 1100 30 9000 400 600 20 5000 300 0 650 900
   3     1    1048576 hda1 10 0 80 3 5 0 40 2 0 5 5
  22     0    9767520 hdc 0 0 0 0 0 0 0 0 0 0 0
"""

STAT_LEGACY_T0 = """\
cpu  1000 100 500 8400
cpu0 500 50 250 4200
cpu1 500 50 250 4200
"""

STAT_LEGACY_T1 = """\
cpu  1080 120 560 8640
cpu0 540 60 280 4320
cpu1 540 60 280 4320
"""


def write_proc(
    root: Path,
    diskstats: str | None = None,
    partitions: str | None = None,
    stat: str | None = None,
    cpuinfo: str | None = CPUINFO_TWO_CPUS,
) -> Path:
    """Create (or update) files of a fake proc tree; None leaves a file untouched."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in (
        ("diskstats", diskstats),
        ("partitions", partitions),
        ("stat", stat),
        ("cpuinfo", cpuinfo),
    ):
        if content is not None:
            (root / name).write_text(content)
    return root


@pytest.fixture
def modern_proc(tmp_path: Path) -> Path:
    """Proc tree of a diskstats kernel at its first sample."""
    return write_proc(tmp_path / "proc", diskstats=DISKSTATS_T0, stat=STAT_T0)


@pytest.fixture
def legacy_proc(tmp_path: Path) -> Path:
    """Proc tree of a sard-patched partitions kernel at its first sample."""
    return write_proc(tmp_path / "proc", partitions=PARTITIONS_T0, stat=STAT_LEGACY_T0)
