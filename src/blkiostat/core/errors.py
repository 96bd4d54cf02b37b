"""Exception hierarchy for blkiostat.

Fatal errors (ConfigError, SourceReadError) end the process with a single
diagnostic line. ComputeError is recoverable: the affected interval is
simply not reported.
"""

from __future__ import annotations


class BlkiostatError(Exception):
    """Base class for all blkiostat errors."""


class ConfigError(BlkiostatError):
    """Invalid configuration or unreadable discovery source."""


class SourceReadError(BlkiostatError):
    """A counter source could not be read during sampling."""


class ComputeError(BlkiostatError):
    """Rates cannot be derived for an interval (e.g. non-positive elapsed time)."""
