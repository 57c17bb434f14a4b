"""Error taxonomy for the rendering engine.

Every failure raised by housedash derives from :class:`DashboardError`.
The orchestrator uses the concrete type to decide what happens to a
chart: fetch failures are retried, everything else fails the chart at
once.  Errors never cross chart boundaries.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all housedash errors."""


class ConfigError(DashboardError):
    """Malformed or missing style or chart configuration.

    Raised before any chart task is started and aborts the whole run.
    """


class DataFetchError(DashboardError):
    """A data source query failed (network, timeout, unreadable snapshot).

    Retried with exponential backoff by the orchestrator.
    """


class RenderError(DashboardError):
    """Invalid geometry, colormap bounds or image data during layout.

    Not retryable; reported for the chart only.
    """


class SinkError(DashboardError, OSError):
    """Writing a rendered chart to its target failed."""


__all__ = [
    "DashboardError",
    "ConfigError",
    "DataFetchError",
    "RenderError",
    "SinkError",
]
