"""Pydantic model for the chart style.

A single :class:`Style` is loaded per run and shared, read-only, by
every chart task.  It is frozen so that no task can mutate it.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import TIMEZONE_DEFAULT
from .palette import SystemPalette, resolve_series_palette


class Style(BaseModel):
    """Style shared by all charts of a run.

    Attributes:
        font_path: Optional TTF/OTF font file.  Pillow's bundled font is
            used when absent.
        font_scale: Multiplier applied to every font size.
        system_palette: ``Light`` or ``Dark`` theme for chart furniture.
        series_palette: Name of a Colorbrewer palette or an explicit
            list of ``#rrggbb`` colors, assigned cyclically to series.
        resolution: Canvas size ``(width, height)`` in pixels.
        draw_markers: Draw a dot at every trend sample.
        timezone: IANA timezone for axis labels and timestamps.
    """

    model_config = ConfigDict(frozen=True)

    font_path: Optional[Path] = None
    font_scale: float = Field(default=1.0, gt=0)
    system_palette: SystemPalette = SystemPalette.LIGHT
    series_palette: Union[str, List[str]] = "ColorbrewerSet1"
    resolution: Tuple[int, int] = (320, 240)
    draw_markers: bool = False
    timezone: str = TIMEZONE_DEFAULT

    @field_validator("series_palette")
    @classmethod
    def check_series_palette(cls, value):
        resolve_series_palette(value)
        return value

    @field_validator("resolution")
    @classmethod
    def check_resolution(cls, value):
        width, height = value
        if width <= 0 or height <= 0:
            raise ValueError(f"resolution must be positive, got {width}x{height}")
        return value

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value):
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @property
    def width(self) -> int:
        return self.resolution[0]

    @property
    def height(self) -> int:
        return self.resolution[1]

    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
