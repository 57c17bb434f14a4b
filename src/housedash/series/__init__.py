"""Fetched chart data and the transformations applied to it."""

from .models import HostStatus, Sample, Series, TimeWindow
from .transform import (
    aggregate,
    color_indices,
    latest_value,
    resample,
    resample_all,
    sort_tags,
)

__all__ = [
    "HostStatus",
    "Sample",
    "Series",
    "TimeWindow",
    "aggregate",
    "color_indices",
    "latest_value",
    "resample",
    "resample_all",
    "sort_tags",
]
