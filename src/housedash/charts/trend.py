"""Trend charts: one line per tag over the query window.

The plot area sits below the title with a fixed margin, a band for the X
tick labels underneath and a band for the Y tick labels and the Y label
on the left.  Axes and the optional horizontal grid are drawn first so
that series always paint over them; the legend goes on top of
everything.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from ..config import LABEL_FONT_SIZE
from ..errors import RenderError
from ..series.models import Series, TimeWindow
from ..series.transform import Bucket, color_indices, resample_all, scale_series, value_range
from ..style.resolver import StyleResolver
from . import elements
from .canvas import Circle, Fill, Instruction, Line, Rect, Text
from .models import TrendSpec

MARGIN = 5
X_LABEL_AREA = 20
Y_LABEL_AREA = 50
TICK_LENGTH = 3
LINE_WIDTH = 3
MARKER_RADIUS = 3
LEGEND_SAMPLE_LENGTH = 20

# Candidate spacings for time ticks, smallest first.
_TIME_STEPS = [
    timedelta(minutes=m) for m in (1, 2, 5, 10, 15, 30)
] + [
    timedelta(hours=h) for h in (1, 2, 3, 6, 12)
] + [
    timedelta(days=d) for d in (1, 2, 7, 14, 30, 91, 182, 365)
]


@dataclass(frozen=True)
class PlotArea:
    """Pixel box of the data area and the value range it maps."""

    left: float
    top: float
    right: float
    bottom: float
    window: TimeWindow
    y_min: float
    y_max: float

    def x(self, ts: datetime) -> float:
        span = self.window.duration.total_seconds()
        offset = (ts - self.window.start).total_seconds()
        return self.left + (self.right - self.left) * offset / span

    def y(self, value: float) -> float:
        return self.bottom - (self.bottom - self.top) * (value - self.y_min) / (self.y_max - self.y_min)


def y_range(
    buckets: Mapping[str, Sequence[Bucket]],
    top_padding: float = 0.0,
    min_y_range: Optional[float] = None,
) -> Tuple[float, float]:
    """Y axis bounds for the resampled series.

    The union of all values, raised by ``top_padding`` times the span to
    leave room for the legend, then widened symmetrically in tenths of
    ``min_y_range`` until the span reaches it.  A flat or empty range is
    widened by one unit.
    """
    extent = value_range(buckets)
    if extent is None:
        return 0.0, 1.0
    low, high = extent
    high += top_padding * (high - low)
    if min_y_range is not None:
        increment = min_y_range / 10.0
        while high - low < min_y_range:
            low -= increment
            high += increment
    if high == low:
        low, high = low - 0.5, high + 0.5
    return low, high


def time_ticks(window: TimeWindow, max_ticks: int, zone) -> List[datetime]:
    """At most ``max_ticks`` evenly spaced, round time ticks in the window.

    Ticks fall on multiples of the spacing counted from local midnight of
    the window start.
    """
    local_start = window.start.astimezone(zone)
    midnight = local_start.replace(hour=0, minute=0, second=0, microsecond=0)
    ticks: List[datetime] = []
    for step in _TIME_STEPS:
        first = midnight + step * math.ceil((local_start - midnight) / step)
        ticks = []
        tick = first
        while tick < window.end:
            ticks.append(tick)
            tick = tick + step
        if len(ticks) <= max_ticks:
            return ticks
    return ticks[:max_ticks]


def value_ticks(low: float, high: float, max_ticks: int) -> List[float]:
    """At most ``max_ticks`` round values (1, 2 or 5 times a power of ten)."""
    if high <= low:
        return [low]
    raw = (high - low) / max(max_ticks, 1)
    exponent = math.floor(math.log10(raw))
    while True:
        for multiplier in (1, 2, 5):
            step = multiplier * 10.0 ** exponent
            first = math.ceil(low / step)
            last = math.floor(high / step)
            if last - first + 1 <= max_ticks:
                return [i * step for i in range(first, last + 1)]
        exponent += 1


def _axes(spec: TrendSpec, resolver: StyleResolver, area: PlotArea) -> List[Instruction]:
    foreground = resolver.foreground_color()
    instructions: List[Instruction] = []

    y_ticks = value_ticks(area.y_min, area.y_max, spec.max_y_ticks)
    if spec.draw_horizontal_grid:
        for value in y_ticks:
            y = area.y(value)
            instructions.append(Line(((area.left, y), (area.right, y)), resolver.grid_color()))

    instructions.append(
        Line(((area.left, area.top), (area.left, area.bottom), (area.right, area.bottom)), foreground)
    )
    for value in y_ticks:
        y = area.y(value)
        instructions.append(Line(((area.left - TICK_LENGTH, y), (area.left, y)), foreground))
        instructions.append(
            Text(
                (area.left - TICK_LENGTH - 2, y),
                f"{value:.{spec.precision}f}",
                foreground,
                LABEL_FONT_SIZE,
                anchor="rm",
            )
        )

    for tick in time_ticks(area.window, spec.max_x_ticks, resolver.style.zone()):
        x = area.x(tick)
        instructions.append(Line(((x, area.bottom), (x, area.bottom + TICK_LENGTH)), foreground))
        instructions.append(
            Text(
                (x, area.bottom + TICK_LENGTH + 2),
                tick.strftime(spec.xlabel_format),
                foreground,
                LABEL_FONT_SIZE,
                anchor="mt",
            )
        )

    ylabel = spec.ylabel or ""
    if ylabel and spec.yunit:
        ylabel = f"{ylabel} [{spec.yunit}]"
    if ylabel:
        instructions.append(
            Text(
                (MARGIN, (area.top + area.bottom) / 2),
                ylabel,
                foreground,
                LABEL_FONT_SIZE,
                anchor="lm",
                angle=90,
            )
        )
    return instructions


def _runs(area: PlotArea, buckets: Sequence[Bucket]) -> List[List[Tuple[float, float]]]:
    """Split buckets into runs of consecutive non-null points."""
    runs: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    for ts, value in buckets:
        if value is None:
            if current:
                runs.append(current)
            current = []
        else:
            current.append((area.x(ts), area.y(value)))
    if current:
        runs.append(current)
    return runs


def _series(
    spec: TrendSpec,
    resolver: StyleResolver,
    area: PlotArea,
    tag: str,
    index: int,
    buckets: Sequence[Bucket],
) -> List[Instruction]:
    color = resolver.color_for_series_index(index)
    instructions: List[Instruction] = []
    for run in _runs(area, buckets):
        if len(run) == 1:
            instructions.append(Circle(run[0], LINE_WIDTH / 2, fill=color))
        else:
            instructions.append(Line(tuple(run), color, width=LINE_WIDTH))
        if resolver.style.draw_markers:
            instructions.extend(Circle(point, MARKER_RADIUS, fill=color) for point in run)

    if spec.draw_last_value:
        last = next(((ts, v) for ts, v in reversed(buckets) if v is not None), None)
        if last is None:
            logger.warning("Empty time-series '{}', cannot draw last value", tag)
        else:
            ts, value = last
            instructions.append(
                Text(
                    (area.x(ts), area.y(value)),
                    f"{value:.{spec.precision}f}",
                    resolver.foreground_color(),
                    LABEL_FONT_SIZE,
                    anchor="rb",
                )
            )
    return instructions


def _legend(resolver: StyleResolver, area: PlotArea, indices: Dict[str, int]) -> List[Instruction]:
    if not indices:
        return []
    text_heights = [resolver.text_size(tag, LABEL_FONT_SIZE)[1] for tag in indices]
    text_widths = [resolver.text_size(tag, LABEL_FONT_SIZE)[0] for tag in indices]
    row = max(text_heights) + 4
    x0 = area.left + 5
    y0 = area.top + 5
    x1 = x0 + 5 + LEGEND_SAMPLE_LENGTH + 5 + max(text_widths) + 5
    y1 = y0 + row * len(indices) + 2
    instructions: List[Instruction] = [
        Rect(
            x0,
            y0,
            x1,
            y1,
            fill=resolver.light_background_color(),
            outline=resolver.light_foreground_color(),
        )
    ]
    for i, (tag, index) in enumerate(indices.items()):
        cy = y0 + 1 + row * i + row / 2
        color = resolver.color_for_series_index(index)
        instructions.append(Line(((x0 + 5, cy), (x0 + 5 + LEGEND_SAMPLE_LENGTH, cy)), color, width=2))
        instructions.append(
            Text(
                (x0 + 10 + LEGEND_SAMPLE_LENGTH, cy),
                tag,
                resolver.foreground_color(),
                LABEL_FONT_SIZE,
                anchor="lm",
            )
        )
    return instructions


def layout(
    spec: TrendSpec,
    resolver: StyleResolver,
    data: Mapping[str, Series],
    now: datetime,
) -> List[Instruction]:
    """Lay out a trend chart over the window ending at ``now``."""
    logger.info("Drawing trend '{}'", spec.title.lower())
    window = spec.window(now)

    instructions: List[Instruction] = [Fill(resolver.background_color())]
    title, title_height = elements.title(resolver, spec.title)
    instructions.extend(title)

    indices = color_indices(data.keys(), spec.tag_values)
    for tag in sorted(set(data) - set(indices)):
        logger.debug("Skipping unexpected tag value '{}'", tag)
    series = {tag: scale_series(data[tag], spec.scale) for tag in indices}
    buckets = resample_all(series, spec.how_often, window, spec.aggregator)

    low, high = y_range(buckets, spec.top_padding, spec.min_y_range)
    logger.debug("Plot Y range: [{}, {}]", low, high)
    area = PlotArea(
        left=MARGIN + Y_LABEL_AREA,
        top=title_height + MARGIN,
        right=resolver.width - MARGIN - 1,
        bottom=resolver.height - MARGIN - X_LABEL_AREA,
        window=window,
        y_min=low,
        y_max=high,
    )
    if area.right <= area.left or area.bottom <= area.top:
        raise RenderError(
            f"canvas {resolver.width}x{resolver.height} leaves no room for the plot area"
        )

    instructions.extend(_axes(spec, resolver, area))
    for tag, rows in buckets.items():
        instructions.extend(_series(spec, resolver, area, tag, indices[tag], rows))
    if not spec.hide_legend:
        instructions.extend(_legend(resolver, area, indices))
    return instructions


__all__ = ["PlotArea", "layout", "time_ticks", "value_ticks", "y_range"]
