"""Geographical heat maps: regions colored by their latest value.

Regions are given in arbitrary planar coordinates.  They are optionally
projected with a 2:1 isometric transform, then scaled together, keeping
their aspect ratio, to fit the area left of the colorbar margin.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from ..colormap import build_colormap, color_for
from ..config import LABEL_FONT_SIZE
from ..errors import RenderError
from ..series.models import Series
from ..series.transform import latest_value, scale_series
from ..style.palette import Color
from ..style.resolver import StyleResolver
from . import elements
from .canvas import Fill, Instruction, Line, Point, Polygon, Text
from .models import GeographicalHeatMapSpec, Region

REGION_MARGIN = 5
COLORBAR_TOP = 40
COLORBAR_BOTTOM = 20
COLORBAR_WIDTH = 10
ISOMETRIC_SIZE = 0.5

# Region labels are black under both system palettes.
LABEL_COLOR: Color = (0, 0, 0)


def project_isometric(point: Point) -> Point:
    """Project a ground-plane point with a 2:1 isometry."""
    x, y = point
    return (
        ISOMETRIC_SIZE * x - ISOMETRIC_SIZE * y,
        ISOMETRIC_SIZE * 0.5 * x + ISOMETRIC_SIZE * 0.5 * y,
    )


def bounds_of(regions: Mapping[str, Sequence[Point]]) -> Tuple[float, float, float, float]:
    """Return ``(min_x, max_x, min_y, max_y)`` over all regions."""
    xs = [x for path in regions.values() for x, _ in path]
    ys = [y for path in regions.values() for _, y in path]
    return min(xs), max(xs), min(ys), max(ys)


def normalize_regions(
    regions: Mapping[str, Sequence[Point]],
    size: Tuple[float, float],
    margin: float = REGION_MARGIN,
) -> Dict[str, List[Point]]:
    """Scale and center regions uniformly inside a box of ``size``."""
    width, height = size
    min_x, max_x, min_y, max_y = bounds_of(regions)
    dx = max_x - min_x
    dy = max_y - min_y
    if dx <= 0 or dy <= 0:
        raise RenderError("regions have zero area")
    effective_width = width - 2 * margin
    effective_height = height - 2 * margin
    if effective_width <= 0 or effective_height <= 0:
        raise RenderError(f"no room to draw regions in {width}x{height}")
    ratio = min(effective_width / dx, effective_height / dy)
    slack_x = effective_width - dx * ratio
    slack_y = effective_height - dy * ratio
    return {
        name: [
            (
                margin + slack_x / 2 + (x - min_x) * ratio,
                margin + slack_y / 2 + (y - min_y) * ratio,
            )
            for x, y in path
        ]
        for name, path in regions.items()
    }


def area_of(path: Sequence[Point]) -> float:
    """Signed polygon area by the shoelace formula."""
    total = 0.0
    for (x1, y1), (x2, y2) in zip(path, list(path[1:]) + [path[0]]):
        total += x1 * y2 - x2 * y1
    return total / 2.0


def centroid_of(path: Sequence[Point]) -> Point:
    """Area centroid of a simple polygon, convex or not.

    A path without area (collinear or coincident vertices) has no area
    centroid; the mean of its vertices is returned instead.
    """
    area = area_of(path)
    if area == 0:
        return (
            sum(x for x, _ in path) / len(path),
            sum(y for _, y in path) / len(path),
        )
    cx = cy = 0.0
    for (x1, y1), (x2, y2) in zip(path, list(path[1:]) + [path[0]]):
        cross = x1 * y2 - x2 * y1
        cx += (x1 + x2) * cross
        cy += (y1 + y2) * cross
    return cx / (6.0 * area), cy / (6.0 * area)


def _border(
    spec: GeographicalHeatMapSpec, resolver: StyleResolver, name: str
) -> Tuple[Color, int]:
    colored = spec.colored_tag_values or []
    if name in colored:
        return resolver.color_for_series_index(colored.index(name)), 2
    return resolver.light_foreground_color(), 1


def region_values(
    spec: GeographicalHeatMapSpec, data: Mapping[str, Series]
) -> Dict[str, Optional[float]]:
    values: Dict[str, Optional[float]] = {}
    for region in spec.regions or []:
        series = data.get(region.name)
        values[region.name] = (
            None if series is None else latest_value(scale_series(series, spec.scale))
        )
    return values


def layout(
    spec: GeographicalHeatMapSpec,
    resolver: StyleResolver,
    data: Mapping[str, Series],
    now: datetime,
) -> List[Instruction]:
    """Lay out a geographical heat map.

    Regions without data are drawn with the no-data marker and get no
    label.
    """
    logger.info("Drawing geographical heatmap '{}'", spec.title.lower())
    regions: List[Region] = list(spec.regions or [])
    if not regions:
        raise RenderError(f"geographical heat map '{spec.title}' has no regions")

    instructions: List[Instruction] = [Fill(resolver.background_color())]
    title, title_height = elements.title(resolver, spec.title)
    instructions.extend(title)

    values = region_values(spec, data)
    colormap = build_colormap(spec.colormap, spec.bounds, spec.reversed)
    if spec.bounds is None:
        colormap = colormap.fit(values.values())

    logger.debug("Computing projected regions")
    paths: Dict[str, List[Point]] = {
        region.name: [
            project_isometric(p) if spec.isometric else p for p in region.coordinates
        ]
        for region in regions
    }
    normalized = normalize_regions(
        paths, (resolver.width - spec.right_margin, resolver.height - title_height)
    )

    for name in sorted(normalized):
        path = [(int(x), int(y + title_height)) for x, y in normalized[name]]
        value = values.get(name)
        logger.debug("Drawing region {}, value: {}", name, value)
        if value is None:
            instructions.extend(elements.no_data_polygon(resolver, path))
        else:
            instructions.append(Polygon(tuple(path), fill=color_for(value, colormap)))
            cx, cy = centroid_of(normalized[name])
            instructions.append(
                Text(
                    (cx, cy + title_height),
                    f"{value:.{spec.precision}f}",
                    LABEL_COLOR,
                    LABEL_FONT_SIZE,
                    anchor="mm",
                )
            )
        color, width = _border(spec, resolver, name)
        instructions.append(Line(tuple(path + [path[0]]), color, width=width))

    instructions.extend(
        elements.colorbar(
            resolver,
            colormap,
            (resolver.width - spec.right_margin + REGION_MARGIN, COLORBAR_TOP),
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
    "area_of",
    "bounds_of",
    "centroid_of",
    "layout",
    "normalize_regions",
    "project_isometric",
    "region_values",
]
