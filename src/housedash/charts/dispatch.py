"""Dispatch from chart configuration to layout function.

Every model of :data:`housedash.charts.models.ChartSpec` maps to exactly
one layout function.  The table is checked when the module is imported,
so a chart kind added to the union without a layout fails loudly instead
of at render time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List

from PIL import Image

from ..errors import RenderError
from ..style.resolver import StyleResolver
from . import geographical_heatmap, image, summary, temporal_heatmap, trend
from .canvas import Instruction, rasterize
from .models import (
    CHART_SPEC_TYPES,
    GeographicalHeatMapSpec,
    ImageSpec,
    InfrastructureSummarySpec,
    ProxmoxSummarySpec,
    TemporalHeatMapSpec,
    TrendSpec,
)

Layout = Callable[[Any, StyleResolver, Any, datetime], List[Instruction]]

LAYOUTS: Dict[type, Layout] = {
    TrendSpec: trend.layout,
    TemporalHeatMapSpec: temporal_heatmap.layout,
    GeographicalHeatMapSpec: geographical_heatmap.layout,
    InfrastructureSummarySpec: summary.layout_infrastructure,
    ProxmoxSummarySpec: summary.layout_proxmox,
    ImageSpec: image.layout,
}

_missing = [t.__name__ for t in CHART_SPEC_TYPES if t not in LAYOUTS]
if _missing:
    raise RuntimeError(f"no layout registered for chart kind(s): {', '.join(_missing)}")


def layout(spec, resolver: StyleResolver, data, now: datetime) -> List[Instruction]:
    """Return the drawing instructions of ``spec`` for ``data``."""
    try:
        func = LAYOUTS[type(spec)]
    except KeyError:
        raise RenderError(f"unsupported chart configuration {type(spec).__name__}") from None
    return func(spec, resolver, data, now)


def render(spec, resolver: StyleResolver, data, now: datetime) -> Image.Image:
    """Lay out and rasterize one chart."""
    return rasterize(layout(spec, resolver, data, now), resolver)


__all__ = ["LAYOUTS", "layout", "render"]
