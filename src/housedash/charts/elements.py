"""Building blocks shared by several chart kinds.

Each helper returns drawing instructions; none of them rasterizes.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..colormap import ColorMap, colors_for, legend
from ..config import GRADIENT_STEPS, LABEL_FONT_SIZE, TITLE_FONT_SIZE
from ..style.resolver import StyleResolver
from .canvas import Instruction, Line, Point, Polygon, Rect, Text

# Space between the top of the canvas and the title text.
TITLE_SKIP = 5

# Colorbars label every quarter of their height.
COLORBAR_TICKS = 5


def title(resolver: StyleResolver, text: str) -> Tuple[List[Instruction], int]:
    """Centered chart title.

    Returns the instructions and the height reserved for the title, twice
    the height of the rendered text.
    """
    _, box_height = resolver.text_size(text or "X", TITLE_FONT_SIZE)
    instructions: List[Instruction] = [
        Text(
            (resolver.width / 2, box_height // 2 + TITLE_SKIP),
            text,
            resolver.foreground_color(),
            TITLE_FONT_SIZE,
            anchor="mt",
        )
    ]
    return instructions, box_height * 2


def colorbar(
    resolver: StyleResolver,
    colormap: ColorMap,
    position: Tuple[int, int],
    size: Tuple[int, int],
    precision: int = 0,
    unit: str = "",
    steps: int = GRADIENT_STEPS,
) -> List[Instruction]:
    """Vertical colorbar with the high bound at the top.

    The bar is divided into ``steps`` strips and labeled on its right at
    the top, bottom and every quarter in between.
    """
    x, y = position
    width, height = size
    instructions: List[Instruction] = [
        Rect(x - 1, y - 1, x + width + 1, y + height + 1, outline=resolver.light_foreground_color())
    ]
    step = height / steps
    lo, hi = colormap.lo, colormap.hi
    values = [lo + (steps - i - 1) * (hi - lo) / (steps - 1) for i in range(steps)]
    edges = [y + int(i * step) for i in range(steps + 1)]
    for i, color in enumerate(colors_for(values, colormap)):
        instructions.append(Rect(x, edges[i], x + width, edges[i + 1], fill=color))
    for position_, label, _ in legend(colormap, COLORBAR_TICKS, precision, unit):
        i = int(round(position_ * (steps - 1)))
        instructions.append(
            Text(
                (x + width + 5, (edges[i] + edges[i + 1]) / 2),
                label,
                resolver.foreground_color(),
                LABEL_FONT_SIZE,
                anchor="lm",
            )
        )
    return instructions


def load_bar(
    resolver: StyleResolver,
    colormap: ColorMap,
    center: Tuple[int, int],
    size: Tuple[int, int],
    value: float,
    max_value: float,
    steps: int = GRADIENT_STEPS,
) -> List[Instruction]:
    """Horizontal bar filled up to ``value / max_value`` of its length.

    Every filled step takes the colormap color of its own start value, so
    a full bar shows the whole colormap.
    """
    cx, cy = center
    width, height = size
    half_w, half_h = width // 2, height // 2
    instructions: List[Instruction] = [
        Rect(
            cx - half_w - 1,
            cy - half_h - 1,
            cx + half_w + 1,
            cy + half_h,
            outline=resolver.light_foreground_color(),
        )
    ]
    if max_value <= 0:
        return instructions
    last = min(max(int(steps * value / max_value), 0), steps)
    step = width / steps
    colors = colors_for([i * max_value / steps for i in range(last)], colormap)
    for i, color in enumerate(colors):
        instructions.append(
            Rect(
                cx - half_w + int(i * step),
                cy - half_h,
                cx - half_w + int((i + 1) * step),
                cy + half_h - 1,
                fill=color,
            )
        )
    return instructions


def no_data_cell(
    resolver: StyleResolver, x0: float, y0: float, x1: float, y1: float
) -> List[Instruction]:
    """Rectangle marking a cell with no samples: light fill, one diagonal."""
    return [
        Rect(x0, y0, x1, y1, fill=resolver.light_background_color()),
        Line(((x0, y0), (x1, y1)), resolver.grid_color()),
    ]


def no_data_polygon(resolver: StyleResolver, points: Sequence[Point]) -> List[Instruction]:
    """Polygon marking a region with no data: light fill, one diagonal.

    The diagonal joins the vertex closest to the top-left corner with the
    one closest to the bottom-right corner.
    """
    low = min(points, key=lambda p: p[0] + p[1])
    high = max(points, key=lambda p: p[0] + p[1])
    return [
        Polygon(tuple(points), fill=resolver.light_background_color()),
        Line((low, high), resolver.grid_color()),
    ]


__all__ = ["title", "colorbar", "load_bar", "no_data_cell", "no_data_polygon"]
