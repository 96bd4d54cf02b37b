"""Report module - text and JSON rendering of rate samples."""

from __future__ import annotations

from blkiostat.report.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
