"""Chart kinds, their configuration models and the rasterizer."""

from .canvas import Blit, Circle, Fill, Instruction, Line, Polygon, Rect, Text, rasterize
from .dispatch import LAYOUTS, layout, render
from .models import (
    CHART_SPEC_TYPES,
    ChartSpec,
    GeographicalHeatMapSpec,
    HeatMapPeriod,
    ImageSpec,
    InfrastructureSummarySpec,
    ProxmoxSummarySpec,
    Region,
    TemporalHeatMapSpec,
    TrendSpec,
)

__all__ = [
    "Blit",
    "CHART_SPEC_TYPES",
    "ChartSpec",
    "Circle",
    "Fill",
    "GeographicalHeatMapSpec",
    "HeatMapPeriod",
    "ImageSpec",
    "InfrastructureSummarySpec",
    "Instruction",
    "LAYOUTS",
    "Line",
    "Polygon",
    "ProxmoxSummarySpec",
    "Rect",
    "Region",
    "TemporalHeatMapSpec",
    "Text",
    "TrendSpec",
    "layout",
    "rasterize",
    "render",
]
