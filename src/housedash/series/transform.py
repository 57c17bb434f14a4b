"""Time-series transformations shared by the chart kinds.

Resampling always produces one bucket per period across the whole query
window, whatever the observed extent of the data, so a sensor that only
reported during the last hour still gets an axis spanning the full day.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd  # type: ignore

from ..errors import RenderError
from .models import Series, TimeWindow

Bucket = Tuple[datetime, Optional[float]]

AGGREGATORS = ("mean", "median", "min", "max", "sum", "first", "last", "count")


def bucket_count(period: timedelta, window: TimeWindow) -> int:
    """Return ``ceil((end - start) / period)``."""
    if period <= timedelta(0):
        raise RenderError(f"resampling period must be positive, got {period}")
    return -(-window.duration // period)


def _to_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def resample(
    series: Series,
    period: timedelta,
    window: TimeWindow,
    aggregator: str = "mean",
) -> List[Bucket]:
    """Bucket ``series`` into fixed periods starting at the window start.

    Each bucket holds the mean (or ``aggregator``) of the non-null
    samples falling in it.  Buckets without samples repeat the value of
    the nearest earlier non-null bucket, or stay ``None`` when none
    precedes them.  Samples outside the window are ignored.
    """
    if aggregator not in AGGREGATORS:
        raise RenderError(f"unknown aggregator {aggregator!r}; expected one of {AGGREGATORS}")
    n = bucket_count(period, window)
    starts = [window.start + i * period for i in range(n)]
    rows = [
        ((ts - window.start) // period, value)
        for ts, value in series.samples
        if value is not None and window.contains(ts)
    ]
    if not rows:
        return [(start, None) for start in starts]
    frame = pd.DataFrame(rows, columns=["bucket", "value"])
    reduced = frame.groupby("bucket")["value"].agg(aggregator).astype(float)
    filled = reduced.reindex(range(n)).ffill()
    return [(start, _to_float(v)) for start, v in zip(starts, filled.tolist())]


def sort_tags(series: Mapping[str, Series]) -> List[str]:
    """Deterministic tag order: lexicographic."""
    return sorted(series)


def resample_all(
    series: Mapping[str, Series],
    period: timedelta,
    window: TimeWindow,
    aggregator: str = "mean",
) -> Dict[str, List[Bucket]]:
    """Resample every tag; the result iterates in :func:`sort_tags` order."""
    return {
        tag: resample(series[tag], period, window, aggregator)
        for tag in sort_tags(series)
    }


def color_indices(
    tags: Iterable[str],
    tag_values: Optional[Sequence[str]] = None,
) -> Dict[str, int]:
    """Map each tag to a series color index.

    With ``tag_values`` the index is the tag's position in that list and
    tags not listed are left out.  Otherwise tags are numbered in sorted
    order.
    """
    tags = sorted(tags)
    if tag_values is None:
        return {tag: i for i, tag in enumerate(tags)}
    order = {tag: i for i, tag in enumerate(tag_values)}
    return {tag: order[tag] for tag in tags if tag in order}


def aggregate(values: Iterable[Optional[float]], aggregator: str = "mean") -> Optional[float]:
    """Reduce values with a named aggregator, ignoring ``None``.

    Returns ``None`` for empty input except for ``count``, which returns 0.
    """
    if aggregator not in AGGREGATORS:
        raise RenderError(f"unknown aggregator {aggregator!r}; expected one of {AGGREGATORS}")
    data = pd.Series([v for v in values if v is not None], dtype=float)
    if aggregator == "count":
        return float(len(data))
    if data.empty:
        return None
    if aggregator == "first":
        return float(data.iloc[0])
    if aggregator == "last":
        return float(data.iloc[-1])
    return _to_float(getattr(data, aggregator)())


def scale_series(series: Series, factor: float) -> Series:
    """Multiply every non-null sample by ``factor``."""
    if factor == 1.0:
        return series
    return Series(
        tag=series.tag,
        samples=[(ts, None if v is None else v * factor) for ts, v in series.samples],
    )


def latest_value(series: Series) -> Optional[float]:
    """Return the most recent non-null sample value."""
    for _, value in reversed(series.samples):
        if value is not None and not math.isnan(value):
            return value
    return None


def value_range(buckets: Mapping[str, Sequence[Bucket]]) -> Optional[Tuple[float, float]]:
    """Min and max over all non-null bucket values, or ``None``."""
    values = [v for rows in buckets.values() for _, v in rows if v is not None]
    if not values:
        return None
    return min(values), max(values)


__all__ = [
    "AGGREGATORS",
    "Bucket",
    "bucket_count",
    "resample",
    "resample_all",
    "sort_tags",
    "color_indices",
    "aggregate",
    "latest_value",
    "scale_series",
    "value_range",
]
