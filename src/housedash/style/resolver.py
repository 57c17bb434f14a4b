"""Resolve concrete colors and fonts from a :class:`Style`.

The resolver is a pure view over an immutable style.  Series colors are
assigned by index modulo the palette length: a chart with more tags than
palette entries reuses colors from the start of the palette.  That
cycling is deliberate and deterministic, not a bug.
"""

from __future__ import annotations

from typing import Dict, List, Union

from PIL import ImageFont

from ..config import LABEL_FONT_SIZE
from .models import Style
from .palette import Color, SystemColor, pick_system_color, resolve_series_palette

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class StyleResolver:
    """Colors and fonts for one chart task.

    Each chart task builds its own resolver, so the font cache is never
    shared between threads.
    """

    def __init__(self, style: Style) -> None:
        self.style = style
        self._series_colors: List[Color] = resolve_series_palette(style.series_palette)
        self._fonts: Dict[int, Font] = {}

    @property
    def width(self) -> int:
        return self.style.width

    @property
    def height(self) -> int:
        return self.style.height

    @property
    def scale(self) -> float:
        return self.style.font_scale

    def system_color(self, slot: SystemColor) -> Color:
        return pick_system_color(self.style.system_palette, slot)

    def background_color(self) -> Color:
        return self.system_color(SystemColor.BACKGROUND)

    def foreground_color(self) -> Color:
        return self.system_color(SystemColor.FOREGROUND)

    def grid_color(self) -> Color:
        return self.system_color(SystemColor.MIDDLE)

    def light_background_color(self) -> Color:
        return self.system_color(SystemColor.LIGHT_BACKGROUND)

    def light_foreground_color(self) -> Color:
        return self.system_color(SystemColor.LIGHT_FOREGROUND)

    def color_for_series_index(self, index: int) -> Color:
        """Return the series color for ``index``, cycling through the palette."""
        if index < 0:
            index = 0
        return self._series_colors[index % len(self._series_colors)]

    def font_pixel_size(self, size: float) -> int:
        return max(1, int(round(size * self.style.font_scale)))

    def font(self, size: float = LABEL_FONT_SIZE) -> Font:
        """Return a font of ``size`` points scaled by the style font scale."""
        pixels = self.font_pixel_size(size)
        font = self._fonts.get(pixels)
        if font is None:
            if self.style.font_path is not None:
                font = ImageFont.truetype(str(self.style.font_path), size=pixels)
            else:
                font = ImageFont.load_default(size=pixels)
            self._fonts[pixels] = font
        return font

    def text_size(self, text: str, size: float = LABEL_FONT_SIZE) -> tuple:
        """Return ``(width, height)`` of ``text`` rendered at ``size``."""
        left, top, right, bottom = self.font(size).getbbox(text)
        return right - left, bottom - top


__all__ = ["StyleResolver", "Font"]
