"""Pydantic models for chart configuration.

Every chart kind has its own model; :data:`ChartSpec` is the union of all
of them, discriminated by the ``kind`` field.  Adding a chart kind means
adding a model here and a layout function in
:mod:`housedash.charts.dispatch`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)

from ..colormap import NAMED_COLORMAPS
from ..config import TREND_PERIOD_DEFAULT_SECONDS
from ..duration import coerce_duration, require_positive
from ..series.models import TimeWindow
from ..series.transform import AGGREGATORS
from ..style.palette import parse_hex_color

Duration = Annotated[
    timedelta, BeforeValidator(coerce_duration), AfterValidator(require_positive)
]


def _check_aggregator(value: str) -> str:
    if value not in AGGREGATORS:
        raise ValueError(f"unknown aggregator {value!r}; expected one of {list(AGGREGATORS)}")
    return value


def _check_colormap(value):
    if value is None:
        return value
    if isinstance(value, str):
        if value not in NAMED_COLORMAPS:
            raise ValueError(
                f"unknown colormap {value!r}; expected one of {sorted(NAMED_COLORMAPS)}"
            )
        return value
    if len(value) < 2:
        raise ValueError("a custom colormap needs at least two colors")
    for color in value:
        parse_hex_color(color)
    return value


class Region(BaseModel):
    """A named polygon drawn by the geographical heat map.

    Coordinates are in arbitrary units; the chart rescales all regions
    together to fit the canvas.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    coordinates: List[Tuple[float, float]] = Field(min_length=3)


class _ChartBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str

    def lookback(self) -> Optional[timedelta]:
        """Length of the query window, or ``None`` for charts without one."""
        return getattr(self, "how_long_ago", None)

    def window(self, now: datetime) -> Optional[TimeWindow]:
        lookback = self.lookback()
        if lookback is None:
            return None
        return TimeWindow.ending_at(now, lookback)


class _ColormapFields(BaseModel):
    """Colormap settings shared by the heat maps.

    ``bounds=None`` derives the bounds from the chart's data.
    """

    colormap: Optional[Union[str, List[str]]] = None
    bounds: Optional[Tuple[float, float]] = None
    reversed: bool = False

    @field_validator("colormap")
    @classmethod
    def check_colormap(cls, value):
        return _check_colormap(value)


class TrendSpec(_ChartBase):
    """Line chart with one line per tag."""

    kind: Literal["Trend"] = "Trend"
    ylabel: Optional[str] = None
    yunit: Optional[str] = None
    xlabel_format: str = "%H:%M"
    precision: int = Field(default=0, ge=0)
    draw_last_value: bool = False
    hide_legend: bool = False
    top_padding: float = Field(default=0.0, ge=0)
    min_y_range: Optional[float] = Field(default=None, gt=0)
    draw_horizontal_grid: bool = False
    max_x_ticks: int = Field(default=4, ge=1)
    max_y_ticks: int = Field(default=5, ge=1)
    how_long_ago: Duration = timedelta(days=1)
    how_often: Duration = timedelta(seconds=TREND_PERIOD_DEFAULT_SECONDS)
    tag_values: Optional[List[str]] = None
    aggregator: str = "mean"
    scale: float = 1.0

    @field_validator("aggregator")
    @classmethod
    def check_aggregator(cls, value: str) -> str:
        return _check_aggregator(value)


class HeatMapPeriod(str, Enum):
    """Grid shape of a temporal heat map."""

    HOUR_OVER_DAY = "HourOverDay"
    DAY_OVER_MONTH = "DayOverMonth"

    @property
    def xlabel(self) -> str:
        return "Day" if self is HeatMapPeriod.HOUR_OVER_DAY else "Month"

    @property
    def ylabel(self) -> str:
        return "Hour" if self is HeatMapPeriod.HOUR_OVER_DAY else "Day"

    @property
    def xlabel_format(self) -> str:
        return "%d %b" if self is HeatMapPeriod.HOUR_OVER_DAY else "%b"

    @property
    def default_lookback(self) -> timedelta:
        if self is HeatMapPeriod.HOUR_OVER_DAY:
            return timedelta(days=30)
        return timedelta(days=365)

    @property
    def rows(self) -> int:
        return 24 if self is HeatMapPeriod.HOUR_OVER_DAY else 31


class TemporalHeatMapSpec(_ChartBase, _ColormapFields):
    """Periodic grid of one tag's values (hour by day or day by month)."""

    kind: Literal["TemporalHeatMap"] = "TemporalHeatMap"
    precision: int = Field(default=0, ge=0)
    unit: str = ""
    tag_value: str
    period: HeatMapPeriod = HeatMapPeriod.HOUR_OVER_DAY
    how_long_ago: Optional[Duration] = None
    aggregator: str = "mean"
    scale: float = 1.0

    @field_validator("aggregator")
    @classmethod
    def check_aggregator(cls, value: str) -> str:
        return _check_aggregator(value)

    def lookback(self) -> timedelta:
        return self.how_long_ago or self.period.default_lookback


class GeographicalHeatMapSpec(_ChartBase, _ColormapFields):
    """Regions colored by the latest value of the tag named like them."""

    kind: Literal["GeographicalHeatMap"] = "GeographicalHeatMap"
    precision: int = Field(default=0, ge=0)
    unit: str = ""
    how_long_ago: Duration = timedelta(hours=1)
    colored_tag_values: Optional[List[str]] = None
    regions: Optional[List[Region]] = None
    right_margin: int = Field(default=60, ge=0)
    isometric: bool = False
    scale: float = 1.0


class InfrastructureSummarySpec(_ChartBase):
    """Table of hosts with status dots and load bars."""

    kind: Literal["InfrastructureSummary"] = "InfrastructureSummary"
    how_long_ago: Duration = timedelta(hours=1)
    suffix: Optional[str] = None
    last_update_format: Optional[str] = None
    vertical_step: int = Field(default=20, gt=0)


class ProxmoxSummarySpec(_ChartBase):
    """Compact host table for the virtual machines of one Proxmox node."""

    kind: Literal["ProxmoxSummary"] = "ProxmoxSummary"
    how_long_ago: Duration = timedelta(hours=1)
    suffix: Optional[str] = None
    vertical_step: int = Field(default=20, gt=0)
    node_fqdn: str


class ImageSpec(_ChartBase):
    """A static picture scaled to fill the screen."""

    kind: Literal["Image"] = "Image"
    title: str = ""
    path: Path


ChartSpec = Annotated[
    Union[
        TrendSpec,
        TemporalHeatMapSpec,
        GeographicalHeatMapSpec,
        InfrastructureSummarySpec,
        ProxmoxSummarySpec,
        ImageSpec,
    ],
    Field(discriminator="kind"),
]

CHART_SPEC_TYPES = (
    TrendSpec,
    TemporalHeatMapSpec,
    GeographicalHeatMapSpec,
    InfrastructureSummarySpec,
    ProxmoxSummarySpec,
    ImageSpec,
)

__all__ = [
    "ChartSpec",
    "CHART_SPEC_TYPES",
    "Duration",
    "GeographicalHeatMapSpec",
    "HeatMapPeriod",
    "ImageSpec",
    "InfrastructureSummarySpec",
    "ProxmoxSummarySpec",
    "Region",
    "TemporalHeatMapSpec",
    "TrendSpec",
]
