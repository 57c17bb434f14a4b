"""Map scalar values to colors through interpolated control points.

A :class:`ColorMap` holds an ordered list of control-point colors, the
numeric bounds they span and a ``reversed`` flag.  Values are clamped to
the bounds and interpolated between the two bracketing control points in
linear-light RGB, then converted back to 8-bit sRGB.  ``NaN`` (and
``None``) maps to the lowest control point, which keeps missing readings
visible without raising.

The named colormaps are the sequential Colorbrewer schemes plus a
three-step ``Status`` map (green, yellow, red) used by the summary
charts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import RenderError
from .style.palette import Color, parse_hex_color

# Palettes from https://colorbrewer2.org/
NAMED_COLORMAPS = {
    "Reds": [
        (255, 245, 240), (254, 224, 210), (252, 187, 161), (252, 146, 114), (251, 106, 74),
        (239, 59, 44), (203, 24, 29), (165, 15, 21), (103, 0, 13),
    ],
    "Blues": [
        (247, 251, 255), (222, 235, 247), (198, 219, 239), (158, 202, 225), (107, 174, 214),
        (66, 146, 198), (33, 113, 181), (8, 81, 156), (8, 48, 107),
    ],
    "Greens": [
        (247, 252, 245), (229, 245, 224), (199, 233, 192), (161, 217, 155), (116, 196, 118),
        (65, 171, 93), (35, 139, 69), (0, 109, 44), (0, 68, 27),
    ],
    "Grays": [
        (255, 255, 255), (240, 240, 240), (217, 217, 217), (189, 189, 189), (150, 150, 150),
        (115, 115, 115), (82, 82, 82), (37, 37, 37), (0, 0, 0),
    ],
    "Oranges": [
        (255, 245, 235), (254, 230, 206), (253, 208, 162), (253, 174, 107), (253, 141, 60),
        (241, 105, 19), (217, 72, 1), (166, 54, 3), (127, 39, 4),
    ],
    "Violets": [
        (252, 251, 253), (239, 237, 245), (218, 218, 235), (188, 189, 220), (158, 154, 200),
        (128, 125, 186), (106, 81, 163), (84, 39, 143), (63, 0, 125),
    ],
    "CoolWarm": [
        (5, 48, 97), (33, 102, 172), (5, 113, 176), (67, 147, 195), (103, 169, 207),
        (146, 197, 222), (209, 229, 240), (247, 247, 247), (253, 219, 199), (244, 165, 130),
        (239, 138, 98), (214, 96, 77), (202, 0, 32), (178, 24, 43), (103, 0, 31),
    ],
    "Status": [
        (77, 175, 74), (255, 255, 51), (228, 26, 28),
    ],
}

DEFAULT_COLORMAP = "Blues"


def _srgb_to_linear(channels: np.ndarray) -> np.ndarray:
    c = channels / 255.0
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def _linear_to_srgb(channels: np.ndarray) -> np.ndarray:
    c = np.clip(channels, 0.0, 1.0)
    srgb = np.where(c <= 0.0031308, c * 12.92, 1.055 * np.power(c, 1.0 / 2.4) - 0.055)
    return np.rint(srgb * 255.0).astype(int)


@dataclass(frozen=True)
class ColorMap:
    """Control points, bounds and direction of a colormap.

    ``positions`` optionally places each control point in [0, 1]; when
    omitted the points are evenly spaced.
    """

    colors: Tuple[Color, ...]
    lo: float = 0.0
    hi: float = 1.0
    reversed: bool = False
    positions: Optional[Tuple[float, ...]] = None

    def __post_init__(self) -> None:
        if len(self.colors) < 2:
            raise RenderError("a colormap needs at least two control points")
        if math.isnan(self.lo) or math.isnan(self.hi):
            raise RenderError("colormap bounds must be numbers")
        if self.lo > self.hi:
            raise RenderError(f"inverted colormap bounds [{self.lo}, {self.hi}]")
        if self.positions is not None:
            pos = list(self.positions)
            if len(pos) != len(self.colors):
                raise RenderError("colormap positions and colors differ in length")
            if pos[0] != 0.0 or pos[-1] != 1.0 or any(b <= a for a, b in zip(pos, pos[1:])):
                raise RenderError("colormap positions must rise strictly from 0 to 1")

    def control_points(self) -> Tuple[List[float], List[Color]]:
        """Return positions and colors in interpolation order."""
        n = len(self.colors)
        if self.positions is None:
            positions = [i / (n - 1) for i in range(n)]
        else:
            positions = list(self.positions)
        colors = list(self.colors)
        if self.reversed:
            colors = colors[::-1]
            positions = [1.0 - p for p in positions[::-1]]
        return positions, colors

    def with_bounds(self, lo: float, hi: float) -> "ColorMap":
        return replace(self, lo=float(lo), hi=float(hi))

    def fit(self, values: Iterable[Optional[float]]) -> "ColorMap":
        """Return a copy whose bounds are the finite extent of ``values``.

        Empty input keeps bounds [0, 1].
        """
        finite = [v for v in values if v is not None and math.isfinite(v)]
        if not finite:
            return self.with_bounds(0.0, 1.0)
        return self.with_bounds(min(finite), max(finite))


def named_colormap(name: str) -> Tuple[Color, ...]:
    try:
        return tuple(NAMED_COLORMAPS[name])
    except KeyError:
        raise RenderError(
            f"unknown colormap {name!r}; expected one of {sorted(NAMED_COLORMAPS)}"
        ) from None


def build_colormap(
    colormap: "str | Sequence[str] | None",
    bounds: Optional[Tuple[float, float]] = None,
    reversed: bool = False,
    positions: Optional[Sequence[float]] = None,
) -> ColorMap:
    """Create a :class:`ColorMap` from configuration values.

    ``colormap`` is a named colormap or a list of ``#rrggbb`` colors.
    ``bounds=None`` yields [0, 1]; callers in auto-bounds mode then call
    :meth:`ColorMap.fit` with the chart's data.
    """
    if colormap is None:
        colors = named_colormap(DEFAULT_COLORMAP)
    elif isinstance(colormap, str):
        colors = named_colormap(colormap)
    else:
        try:
            colors = tuple(parse_hex_color(c) for c in colormap)
        except ValueError as exc:
            raise RenderError(str(exc)) from exc
    lo, hi = bounds if bounds is not None else (0.0, 1.0)
    return ColorMap(
        colors=colors,
        lo=float(lo),
        hi=float(hi),
        reversed=bool(reversed),
        positions=tuple(positions) if positions is not None else None,
    )


def _normalise(values: np.ndarray, colormap: ColorMap) -> np.ndarray:
    lo, hi = colormap.lo, colormap.hi
    if hi == lo:
        return np.where(values <= lo, 0.0, 1.0)
    return np.clip((values - lo) / (hi - lo), 0.0, 1.0)


def colors_for(values: Sequence[Optional[float]], colormap: ColorMap) -> List[Color]:
    """Vectorised :func:`color_for`."""
    positions, colors = colormap.control_points()
    raw = np.array([np.nan if v is None else float(v) for v in values], dtype=float)
    missing = np.isnan(raw)
    t = _normalise(np.where(missing, colormap.lo, raw), colormap)
    t = np.where(missing, 0.0, t)
    linear = _srgb_to_linear(np.array(colors, dtype=float))
    channels = [np.interp(t, positions, linear[:, k]) for k in range(3)]
    srgb = _linear_to_srgb(np.stack(channels, axis=-1))
    return [tuple(int(c) for c in row) for row in srgb]


def color_for(value: Optional[float], colormap: ColorMap) -> Color:
    """Map one value to a color.

    Values outside [lo, hi] take the nearest bound's color; ``NaN`` and
    ``None`` take the lowest control point's color.
    """
    return colors_for([value], colormap)[0]


def legend(
    colormap: ColorMap,
    n_ticks: int,
    precision: int = 0,
    unit: str = "",
) -> List[Tuple[float, str, Color]]:
    """Tick marks for a vertical colorbar.

    Position 0.0 is the top of the bar (``hi``) and 1.0 the bottom
    (``lo``).  Labels use ``precision`` decimals followed by ``unit``.
    """
    if n_ticks < 1:
        raise RenderError(f"a colorbar needs at least one tick, got {n_ticks}")
    if n_ticks == 1:
        positions = [0.0]
    else:
        positions = [i / (n_ticks - 1) for i in range(n_ticks)]
    values = [colormap.hi - p * (colormap.hi - colormap.lo) for p in positions]
    colors = colors_for(values, colormap)
    return [
        (p, f"{v:.{precision}f}{unit}", c)
        for p, v, c in zip(positions, values, colors)
    ]


def blend(a: Color, b: Color, t: float = 0.5) -> Color:
    """Linearly blend two sRGB colors; ``t=0`` gives ``a``, ``t=1`` gives ``b``."""
    t = min(max(t, 0.0), 1.0)
    return tuple(int(round((1.0 - t) * x + t * y)) for x, y in zip(a, b))


__all__ = [
    "ColorMap",
    "NAMED_COLORMAPS",
    "DEFAULT_COLORMAP",
    "named_colormap",
    "build_colormap",
    "color_for",
    "colors_for",
    "legend",
    "blend",
]
