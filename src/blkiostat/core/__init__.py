"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from blkiostat.core.config import build_config, load_config
from blkiostat.core.constants import DEFAULT_REGISTRY_CAPACITY, SECTOR_SIZE
from blkiostat.core.errors import BlkiostatError, ComputeError, ConfigError, SourceReadError
from blkiostat.core.schemas import (
    CpuRates,
    DeviceRates,
    MonitorConfig,
    OutputFormat,
    RateSample,
)

__all__ = [
    "BlkiostatError",
    "ComputeError",
    "ConfigError",
    "CpuRates",
    "DEFAULT_REGISTRY_CAPACITY",
    "DeviceRates",
    "MonitorConfig",
    "OutputFormat",
    "RateSample",
    "SECTOR_SIZE",
    "SourceReadError",
    "build_config",
    "load_config",
]
