"""CLI for blkiostat.

Usage mirrors the classic tool:

    blkiostat [-cdDpPxh] [disks...] [interval [count]]

Without any display option the CPU report is enabled. Of -d and -D the one
given last wins. Without an interval a single report is printed after one
second.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from blkiostat import __version__
from blkiostat.core.config import build_config, load_config
from blkiostat.core.errors import BlkiostatError, ConfigError
from blkiostat.core.schemas import MonitorConfig, OutputFormat
from blkiostat.monitoring.monitor import IostatMonitor
from blkiostat.report.renderer import ReportRenderer
from blkiostat.utils.logging import get_logger, setup_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
# ctx.meta key holding the parameter name of the last -d/-D given
LAST_DISK_FLAG = "blkiostat.last_disk_flag"

app = typer.Typer(
    name="blkiostat",
    help="Linux I/O performance monitoring utility",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

logger = get_logger(__name__)


def split_targets(args: list[str]) -> tuple[list[str], float | None, int | None]:
    """Split positional arguments into disk names, interval and count.

    Leading arguments that do not start with a digit are disk names.

    Raises:
        ConfigError: If more than two numeric arguments are given or they are invalid
    """
    n_dev = 0
    while n_dev < len(args) and not args[n_dev][:1].isdigit():
        n_dev += 1
    disks, numbers = args[:n_dev], args[n_dev:]

    if len(numbers) > 2:
        raise ConfigError(f"Unexpected arguments: {' '.join(numbers[2:])}")

    interval: float | None = None
    count: int | None = None
    try:
        if numbers:
            interval = float(numbers[0])
        if len(numbers) == 2:
            # A count of 0 still produces one report
            count = max(1, int(numbers[1]))
    except ValueError as e:
        raise ConfigError(f"Invalid interval/count: {' '.join(numbers)}") from e

    return disks, interval, count


def build_monitor_config(
    args: list[str],
    flags: dict[str, bool],
    config_path: Path | None = None,
    extra: dict[str, Any] | None = None,
) -> MonitorConfig:
    """Merge the config file, display flags and positional arguments.

    Args:
        args: Positional arguments ([disks...] [interval [count]])
        flags: Display flags keyed by their short option letter
        config_path: Optional YAML/JSON configuration file
        extra: Further explicit overrides (proc root, capacity, format)

    Returns:
        Validated MonitorConfig
    """
    disks, interval, count = split_targets(args)

    overrides: dict[str, Any] = dict(extra or {})
    if flags.get("c"):
        overrides["cpu_reporting_enabled"] = True
    if flags.get("D"):
        overrides["utilization_mode"] = True
    if flags.get("p") or flags.get("P"):
        overrides["show_partitions"] = True
    if flags.get("P"):
        overrides["show_whole_device"] = False
    if flags.get("x"):
        overrides["extended_mode"] = True
    if disks:
        overrides["name_filter"] = disks

    if interval is not None:
        overrides["interval_seconds"] = interval
        overrides["count"] = count
    elif config_path is None:
        overrides["interval_seconds"] = 1.0
        overrides["count"] = 1

    if config_path is not None:
        config = load_config(config_path, overrides)
        if not any(flags.values()) and "cpu_reporting_enabled" not in config.model_fields_set:
            config = config.model_copy(update={"cpu_reporting_enabled": True})
        return config

    if not any(flags.values()):
        overrides["cpu_reporting_enabled"] = True
    return build_config(overrides)


def remember_disk_flag(ctx: typer.Context, param: typer.CallbackParam, value: bool) -> bool:
    """Record which of -d/-D was given last; the later one picks the layout."""
    if value:
        ctx.meta[LAST_DISK_FLAG] = param.name
    return value


@app.command()
def main(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(
        None, help="[disks...] [interval [count]]", show_default=False
    ),
    cpu: bool = typer.Option(False, "-c", help="Print cpu usage info"),
    disk: bool = typer.Option(
        False, "-d", help="Print basic disk info", callback=remember_disk_flag
    ),
    disk_util: bool = typer.Option(
        False, "-D", help="Print disk utilization info", callback=remember_disk_flag
    ),
    partitions: bool = typer.Option(False, "-p", help="Print partition info also"),
    partitions_only: bool = typer.Option(False, "-P", help="Print partition info only"),
    extended: bool = typer.Option(False, "-x", help="Print extended disk info"),
    config: Path | None = typer.Option(
        None, "--config", help="Configuration file (YAML/JSON)"
    ),
    proc_root: Path | None = typer.Option(
        None, "--proc-root", help="Location of the proc filesystem"
    ),
    capacity: int | None = typer.Option(
        None, "--capacity", help="Maximum number of monitored devices"
    ),
    output_format: OutputFormat | None = typer.Option(
        None, "--format", "-f", help="Output format: text, json"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Report block device and CPU statistics."""
    if version:
        console.print(f"blkiostat {__version__}")
        return

    if log_level.upper() not in LOG_LEVELS:
        err_console.print(
            f"blkiostat: unknown log level {log_level}", markup=False, emoji=False
        )
        raise typer.Exit(1)
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    extra: dict[str, Any] = {}
    if proc_root is not None:
        extra["proc_root"] = proc_root
    if capacity is not None:
        extra["registry_capacity"] = capacity
    if output_format is not None:
        extra["output_format"] = output_format

    flags = {
        "c": cpu,
        "d": disk,
        "D": disk_util and ctx.meta.get(LAST_DISK_FLAG) != "disk",
        "p": partitions,
        "P": partitions_only,
        "x": extended,
    }

    try:
        monitor_config = build_monitor_config(args or [], flags, config, extra)
        monitor = IostatMonitor(monitor_config)
        registry = monitor.start()
        renderer = ReportRenderer(
            monitor_config, registry.names, monitor.source.reports_iowait, console=console
        )
        monitor.run(renderer.render, on_baseline=renderer.render_baseline)
    except BlkiostatError as e:
        logger.debug("Fatal error", exc_info=True)
        err_console.print(f"blkiostat: {e}", markup=False, emoji=False)
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        raise typer.Exit(0) from None


if __name__ == "__main__":
    app()
