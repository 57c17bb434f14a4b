"""Color palettes for chart furniture and data series.

The system palette is a five-slot theme (background, foreground, light
background, light foreground, middle) used for titles, axes, legends and
borders.  Series palettes are ordered color lists assigned to data series
by index.  Colors are plain ``(r, g, b)`` tuples of 0-255 integers.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence, Tuple

Color = Tuple[int, int, int]


class SystemPalette(str, Enum):
    """Theme for text and other controls."""

    LIGHT = "Light"
    DARK = "Dark"


class SystemColor(int, Enum):
    """Slot of a system palette."""

    BACKGROUND = 0
    FOREGROUND = 1
    LIGHT_BACKGROUND = 2
    LIGHT_FOREGROUND = 3
    MIDDLE = 4


SYSTEM_PALETTES: Dict[SystemPalette, List[Color]] = {
    SystemPalette.DARK: [
        (0, 0, 0),
        (255, 255, 255),
        (32, 32, 32),
        (192, 192, 192),
        (128, 128, 128),
    ],
    SystemPalette.LIGHT: [
        (255, 255, 255),
        (0, 0, 0),
        (192, 192, 192),
        (32, 32, 32),
        (128, 128, 128),
    ],
}

# Qualitative palettes from https://colorbrewer2.org/
SERIES_PALETTES: Dict[str, List[Color]] = {
    "ColorbrewerSet1": [
        (228, 26, 28),
        (55, 126, 184),
        (77, 175, 74),
        (152, 78, 163),
        (255, 127, 0),
        (255, 255, 51),
        (166, 86, 40),
        (247, 129, 191),
        (153, 153, 153),
    ],
    "ColorbrewerSet2": [
        (102, 194, 165),
        (252, 141, 98),
        (141, 160, 203),
        (231, 138, 195),
        (166, 216, 84),
        (255, 217, 47),
        (229, 196, 148),
        (179, 179, 179),
    ],
    "ColorbrewerSet3": [
        (141, 211, 199),
        (255, 255, 179),
        (190, 186, 218),
        (251, 128, 114),
        (128, 177, 211),
        (253, 180, 98),
        (179, 222, 105),
        (252, 205, 229),
        (217, 217, 217),
        (188, 128, 189),
        (204, 235, 197),
        (255, 237, 111),
    ],
}


def pick_system_color(palette: SystemPalette, slot: SystemColor) -> Color:
    """Map a system color slot to the palette's color."""
    return SYSTEM_PALETTES[SystemPalette(palette)][int(slot)]


def parse_hex_color(text: str) -> Color:
    """Parse ``#rrggbb`` (or ``rrggbb``) into an RGB tuple.

    Raises:
        ValueError: If the string is not a six-digit hex color.
    """
    value = text.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"invalid color {text!r}: expected #rrggbb")
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError as exc:
        raise ValueError(f"invalid color {text!r}: {exc}") from exc


def resolve_series_palette(palette: "str | Sequence[str]") -> List[Color]:
    """Return the color list for a palette name or explicit hex list."""
    if isinstance(palette, str):
        try:
            return list(SERIES_PALETTES[palette])
        except KeyError:
            raise ValueError(
                f"unknown series palette {palette!r}; expected one of {sorted(SERIES_PALETTES)}"
            ) from None
    colors = [parse_hex_color(c) for c in palette]
    if not colors:
        raise ValueError("series palette must contain at least one color")
    return colors


__all__ = [
    "Color",
    "SystemPalette",
    "SystemColor",
    "SYSTEM_PALETTES",
    "SERIES_PALETTES",
    "pick_system_color",
    "parse_hex_color",
    "resolve_series_palette",
]
