"""Report rendering.

Text output keeps the classic iostat column layouts:

    basic        kps tps svc_t          (per device, side by side)
    utilization  r/s w/s %b             (per device, side by side)
    extended     one line per device with merges, rates, size, queue,
                 wait, svc_t and %b

followed by the CPU breakdown (us sy [wt] id) when enabled. JSON output
prints one RateSample object per line.
"""

from __future__ import annotations

from rich.console import Console

from blkiostat.core.constants import HEADER_REPEAT_LINES
from blkiostat.core.schemas import CpuRates, DeviceRates, MonitorConfig, OutputFormat, RateSample

EXTENDED_TITLE = "extended device statistics                       "
EXTENDED_COLUMNS = (
    "device mgr/s mgw/s    r/s    w/s    kr/s    kw/s   size queue   wait svc_t  %b "
)
BASIC_COLUMNS = "  kps tps svc_t "
UTILIZATION_COLUMNS = " r/s  w/s   %b  "
CPU_COLUMNS_WITH_IOWAIT = " us  sy  wt  id"
CPU_COLUMNS = " us  sy  id"


def format_cpu(cpu: CpuRates) -> str:
    """Format the CPU breakdown columns."""
    text = f"{cpu.percent_user:3.0f} {cpu.percent_system:3.0f} "
    if cpu.percent_iowait is not None:
        text += f"{cpu.percent_iowait:3.0f} "
    return text + f"{cpu.percent_idle:3.0f}"


def format_extended(rates: DeviceRates) -> str:
    return (
        f"{rates.name:<6} "
        f"{rates.merge_rate_read:5.0f} {rates.merge_rate_write:5.0f} "
        f"{rates.iops_read:6.1f} {rates.iops_write:6.1f} "
        f"{rates.kbs_read:7.1f} {rates.kbs_write:7.1f} "
        f"{rates.avg_request_size_kb:6.1f} {rates.avg_queue_length:5.1f} "
        f"{rates.avg_wait_ms:6.1f} {rates.avg_service_time_ms:5.1f} "
        f"{rates.percent_busy:3.0f} "
    )


def format_utilization(rates: DeviceRates) -> str:
    return f"{rates.iops_read:4.0f} {rates.iops_write:4.0f} {rates.percent_busy:4.0f}  "


def format_basic(rates: DeviceRates) -> str:
    return f"{rates.kbs_total:5.0f} {rates.iops_total:3.0f} {rates.avg_service_time_ms:5.1f} "


class ReportRenderer:
    """Writes RateSamples to a console in text or JSON form."""

    def __init__(
        self,
        config: MonitorConfig,
        device_names: list[str],
        reports_iowait: bool,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.device_names = device_names
        self.reports_iowait = reports_iowait
        self.console = console or Console(highlight=False, soft_wrap=True)
        self._lineno = 0
        self._header_shown = False

    @property
    def is_text(self) -> bool:
        return self.config.output_format == OutputFormat.TEXT

    def header_lines(self) -> list[str]:
        """Build the two header lines for the configured layout."""
        cpu = self.config.cpu_reporting_enabled
        if self.config.extended_mode:
            first = f"{EXTENDED_TITLE:>78}"
            second = EXTENDED_COLUMNS
        else:
            first = "".join(f"{name:>9}       " for name in self.device_names)
            columns = UTILIZATION_COLUMNS if self.config.utilization_mode else BASIC_COLUMNS
            second = columns * len(self.device_names)

        if cpu:
            first += "      cpu"
            second += CPU_COLUMNS_WITH_IOWAIT if self.reports_iowait else CPU_COLUMNS
        return [first, second]

    def report_lines(self, sample: RateSample) -> list[str]:
        """Build the data lines for one interval."""
        cpu_text = format_cpu(sample.cpu) if sample.cpu is not None else None

        if self.config.extended_mode:
            lines = []
            for index, rates in enumerate(sample.devices):
                line = format_extended(rates)
                if index == 0 and cpu_text is not None:
                    line += cpu_text
                lines.append(line)
            if not sample.devices and cpu_text is not None:
                lines.append(cpu_text)
            return lines

        formatter = format_utilization if self.config.utilization_mode else format_basic
        line = "".join(formatter(rates) for rates in sample.devices)
        if cpu_text is not None:
            line += cpu_text
        return [line]

    def render_baseline(self) -> None:
        """Print the header while the first interval is being measured."""
        if not self.is_text:
            return
        self._write(self.header_lines())
        self._header_shown = True

    def render(self, sample: RateSample) -> None:
        """Print one interval."""
        if not self.is_text:
            self._write([sample.model_dump_json()])
            return

        if not self._header_shown and (self._lineno == 0 or self.config.extended_mode):
            self._write(self.header_lines())
        self._header_shown = False
        self._write(self.report_lines(sample))
        self._lineno = (self._lineno + 1) % HEADER_REPEAT_LINES

    def _write(self, lines: list[str]) -> None:
        for line in lines:
            self.console.print(line, markup=False, emoji=False, highlight=False, soft_wrap=True)
