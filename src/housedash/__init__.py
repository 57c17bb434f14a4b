"""Top-level package for the housedash project.

This package renders dashboard charts into fixed-size bitmaps.  The
command-line interface lives in :mod:`housedash.cli`, chart layouts in
:mod:`housedash.charts`, data sources in :mod:`housedash.providers`,
outputs in :mod:`housedash.sink` and the concurrent, retrying runner in
:mod:`housedash.orchestration`.
"""

__version__ = "0.1.0"

__all__ = [
    "charts",
    "cli",
    "colormap",
    "orchestration",
    "providers",
    "series",
    "sink",
    "style",
]
