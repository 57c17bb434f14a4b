"""Temporal heat maps: one tag's values on a periodic grid.

With ``HourOverDay`` every column is a local calendar day and every row
an hour, hour 0 at the bottom.  With ``DayOverMonth`` columns are months
and rows days of the month.  Cells are aggregated in the style timezone.

Columns are identified by an integer key: the proleptic ordinal of the
day, or ``year * 12 + month - 1`` for months.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd  # type: ignore
from loguru import logger

from ..colormap import build_colormap, colors_for
from ..config import LABEL_FONT_SIZE
from ..errors import RenderError
from ..series.models import Series, TimeWindow
from ..series.transform import aggregate, scale_series
from ..style.resolver import StyleResolver
from . import elements
from .canvas import Fill, Instruction, Line, Rect, Text
from .models import HeatMapPeriod, TemporalHeatMapSpec

MARGIN = 5
X_LABEL_AREA = 35
Y_LABEL_AREA = 40
RIGHT_MARGIN = 60
COLORBAR_TOP = 40
COLORBAR_BOTTOM = 20
COLORBAR_WIDTH = 10
MAX_X_LABELS = 3
TICK_LENGTH = 3


def column_key(period: HeatMapPeriod, day: date) -> int:
    if period is HeatMapPeriod.HOUR_OVER_DAY:
        return day.toordinal()
    return day.year * 12 + day.month - 1


def column_date(period: HeatMapPeriod, key: int) -> date:
    """First day covered by a column."""
    if period is HeatMapPeriod.HOUR_OVER_DAY:
        return date.fromordinal(key)
    return date(key // 12, key % 12 + 1, 1)


def columns(period: HeatMapPeriod, window: TimeWindow, zone) -> List[int]:
    """Keys of the columns touched by the window, oldest first."""
    first = window.start.astimezone(zone).date()
    last = (window.end - timedelta(microseconds=1)).astimezone(zone).date()
    return list(range(column_key(period, first), column_key(period, last) + 1))


def cell_bounds(
    period: HeatMapPeriod, key: int, row: int, zone
) -> Optional[Tuple[datetime, datetime]]:
    """Half-open time span of a cell, or ``None`` if the cell does not exist.

    Days 29 to 31 do not exist in every month.
    """
    day = column_date(period, key)
    if period is HeatMapPeriod.HOUR_OVER_DAY:
        start = datetime(day.year, day.month, day.day, row, tzinfo=zone)
        return start, start + timedelta(hours=1)
    try:
        start = datetime(day.year, day.month, row + 1, tzinfo=zone)
    except ValueError:
        return None
    return start, start + timedelta(days=1)


def aggregate_cells(
    series: Series,
    period: HeatMapPeriod,
    window: TimeWindow,
    zone,
    aggregator: str = "mean",
) -> Dict[Tuple[int, int], float]:
    """Aggregate the samples in the window per ``(column, row)`` cell."""
    rows = []
    for ts, value in series.samples:
        if value is None or not window.contains(ts):
            continue
        local = ts.astimezone(zone)
        if period is HeatMapPeriod.HOUR_OVER_DAY:
            row = local.hour
        else:
            row = local.day - 1
        rows.append((column_key(period, local.date()), row, value))
    if not rows:
        return {}
    frame = pd.DataFrame(rows, columns=["column", "row", "value"])
    reduced = frame.groupby(["column", "row"])["value"].agg(
        lambda values: aggregate(values.tolist(), aggregator)
    )
    return {
        (int(c), int(r)): float(v) for (c, r), v in reduced.items() if not pd.isna(v)
    }


def _axes(
    period: HeatMapPeriod,
    resolver: StyleResolver,
    keys: List[int],
    xs: np.ndarray,
    ys: np.ndarray,
) -> List[Instruction]:
    foreground = resolver.foreground_color()
    left, right = xs[0], xs[-1]
    bottom, top = ys[0], ys[-1]
    instructions: List[Instruction] = [
        Line(((left, top), (left, bottom), (right, bottom)), foreground)
    ]

    n_labels = min(MAX_X_LABELS, len(keys))
    for c in sorted({int(round(i)) for i in np.linspace(0, len(keys) - 1, n_labels)}):
        x = (xs[c] + xs[c + 1]) / 2
        label = column_date(period, keys[c]).strftime(period.xlabel_format)
        instructions.append(Line(((x, bottom), (x, bottom + TICK_LENGTH)), foreground))
        instructions.append(
            Text((x, bottom + TICK_LENGTH + 2), label, foreground, LABEL_FONT_SIZE, anchor="mt")
        )

    for row in range(0, period.rows, period.rows // 4):
        y = (ys[row] + ys[row + 1]) / 2
        label = str(row if period is HeatMapPeriod.HOUR_OVER_DAY else row + 1)
        instructions.append(Line(((left - TICK_LENGTH, y), (left, y)), foreground))
        instructions.append(
            Text((left - TICK_LENGTH - 2, y), label, foreground, LABEL_FONT_SIZE, anchor="rm")
        )

    instructions.append(
        Text(
            ((left + right) / 2, resolver.height - MARGIN),
            period.xlabel,
            foreground,
            LABEL_FONT_SIZE,
            anchor="mb",
        )
    )
    instructions.append(
        Text(
            (MARGIN, (top + bottom) / 2),
            period.ylabel,
            foreground,
            LABEL_FONT_SIZE,
            anchor="lm",
            angle=90,
        )
    )
    return instructions


def layout(
    spec: TemporalHeatMapSpec,
    resolver: StyleResolver,
    data: Mapping[str, Series],
    now: datetime,
) -> List[Instruction]:
    """Lay out a temporal heat map of ``spec.tag_value`` over its window.

    Cells inside the window without samples get the no-data marker;
    cells entirely outside the window are left blank.
    """
    logger.info("Drawing temporal heatmap '{}'", spec.title.lower())
    window = spec.window(now)
    zone = resolver.style.zone()
    period = spec.period

    instructions: List[Instruction] = [Fill(resolver.background_color())]
    title, title_height = elements.title(resolver, spec.title)
    instructions.extend(title)

    series = data.get(spec.tag_value)
    if series is None:
        logger.warning("No samples for tag value '{}'", spec.tag_value)
        series = Series(tag=spec.tag_value)
    series = scale_series(series, spec.scale)
    cells = aggregate_cells(series, period, window, zone, spec.aggregator)

    colormap = build_colormap(spec.colormap, spec.bounds, spec.reversed)
    if spec.bounds is None:
        colormap = colormap.fit(cells.values())

    left = MARGIN + Y_LABEL_AREA
    top = title_height + MARGIN
    right = resolver.width - RIGHT_MARGIN - MARGIN
    bottom = resolver.height - MARGIN - X_LABEL_AREA
    if right <= left or bottom <= top:
        raise RenderError(
            f"canvas {resolver.width}x{resolver.height} leaves no room for the heat map"
        )

    keys = columns(period, window, zone)
    xs = np.linspace(left, right, len(keys) + 1)
    ys = np.linspace(bottom, top, period.rows + 1)
    logger.debug("Heat map grid: {} columns x {} rows", len(keys), period.rows)

    visible = []
    for c, key in enumerate(keys):
        for row in range(period.rows):
            bounds = cell_bounds(period, key, row, zone)
            if bounds is None or bounds[1] <= window.start or bounds[0] >= window.end:
                continue
            box = (int(xs[c]), int(ys[row + 1]), int(xs[c + 1]), int(ys[row]))
            visible.append((box, cells.get((key, row))))

    colors = colors_for([value for _, value in visible if value is not None], colormap)
    colors_iter = iter(colors)
    for (x0, y0, x1, y1), value in visible:
        if value is None:
            instructions.extend(elements.no_data_cell(resolver, x0, y0, x1, y1))
        else:
            instructions.append(Rect(x0, y0, x1, y1, fill=next(colors_iter)))

    instructions.extend(_axes(period, resolver, keys, xs, ys))
    instructions.extend(
        elements.colorbar(
            resolver,
            colormap,
            (resolver.width - RIGHT_MARGIN + MARGIN, COLORBAR_TOP),
            (
                int(COLORBAR_WIDTH * resolver.scale),
                resolver.height - COLORBAR_TOP - COLORBAR_BOTTOM,
            ),
            spec.precision,
            spec.unit,
        )
    )
    return instructions


__all__ = [
    "aggregate_cells",
    "cell_bounds",
    "column_date",
    "column_key",
    "columns",
    "layout",
]
