"""Drawing instructions and the Pillow rasterizer.

Chart layouts never touch pixels.  They return a list of immutable
instructions which :func:`rasterize` paints, in order, onto an RGB
canvas of the style resolution.  Coordinates are pixels with the origin
at the top-left corner; rectangle corners are inclusive like Pillow's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw

from ..errors import RenderError
from ..style.palette import Color
from ..style.resolver import StyleResolver

Point = Tuple[float, float]


@dataclass(frozen=True)
class Fill:
    color: Color


@dataclass(frozen=True)
class Rect:
    x0: float
    y0: float
    x1: float
    y1: float
    fill: Optional[Color] = None
    outline: Optional[Color] = None
    width: int = 1


@dataclass(frozen=True)
class Line:
    points: Tuple[Point, ...]
    color: Color
    width: int = 1


@dataclass(frozen=True)
class Polygon:
    points: Tuple[Point, ...]
    fill: Optional[Color] = None
    outline: Optional[Color] = None
    width: int = 1


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    fill: Optional[Color] = None
    outline: Optional[Color] = None
    width: int = 1


@dataclass(frozen=True)
class Text:
    """A text label.

    ``anchor`` is two letters: horizontal ``l``/``m``/``r`` then vertical
    ``t``/``m``/``b``, naming which point of the text's bounding box sits
    at ``position``.  ``angle`` rotates the text counter-clockwise by a
    multiple of 90 degrees; the anchor then refers to the rotated box.
    """

    position: Point
    text: str
    color: Color
    size: float
    anchor: str = "lt"
    angle: int = 0


@dataclass(frozen=True)
class Blit:
    """Paste a crop of an RGBA bitmap scaled to ``size`` at ``offset``.

    ``box`` is the ``(left, top, right, bottom)`` source crop.
    """

    pixels: np.ndarray = field(compare=False, repr=False)
    box: Tuple[int, int, int, int]
    size: Tuple[int, int]
    offset: Tuple[int, int] = (0, 0)


Instruction = Union[Fill, Rect, Line, Polygon, Circle, Text, Blit]

_H_ANCHORS = {"l": 0.0, "m": 0.5, "r": 1.0}
_V_ANCHORS = {"t": 0.0, "m": 0.5, "b": 1.0}


def _anchor_offset(item: Text, width: float, height: float) -> Tuple[float, float]:
    try:
        h = _H_ANCHORS[item.anchor[0]]
        v = _V_ANCHORS[item.anchor[1]]
    except (KeyError, IndexError):
        raise RenderError(f"invalid text anchor {item.anchor!r}") from None
    return item.position[0] - h * width, item.position[1] - v * height


def _draw_text(canvas: Image.Image, draw: ImageDraw.ImageDraw, item: Text, font) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), item.text, font=font)
    if item.angle % 360 == 0:
        x, y = _anchor_offset(item, right - left, bottom - top)
        draw.text((int(round(x - left)), int(round(y - top))), item.text, fill=item.color, font=font)
        return
    if item.angle % 90 != 0:
        raise RenderError(f"text can only be rotated by multiples of 90 degrees, got {item.angle}")
    mask = Image.new("L", (max(1, right - left), max(1, bottom - top)), 0)
    ImageDraw.Draw(mask).text((-left, -top), item.text, fill=255, font=font)
    mask = mask.rotate(item.angle, expand=True)
    x, y = _anchor_offset(item, mask.width, mask.height)
    canvas.paste(item.color, (int(round(x)), int(round(y))), mask)


def _blit(canvas: Image.Image, item: Blit) -> None:
    if item.pixels.ndim != 3 or item.pixels.shape[2] != 4:
        raise RenderError(f"expected an RGBA bitmap, got shape {item.pixels.shape}")
    source = Image.fromarray(np.ascontiguousarray(item.pixels, dtype=np.uint8))
    scaled = source.crop(item.box).resize(item.size, Image.Resampling.BILINEAR)
    canvas.paste(scaled, item.offset, scaled)


def rasterize(instructions: Sequence[Instruction], resolver: StyleResolver) -> Image.Image:
    """Paint ``instructions`` onto a new RGB canvas of the style resolution."""
    width, height = resolver.width, resolver.height
    if width <= 0 or height <= 0:
        raise RenderError(f"zero-area canvas {width}x{height}")
    canvas = Image.new("RGB", (width, height), resolver.background_color())
    draw = ImageDraw.Draw(canvas)
    for item in instructions:
        if isinstance(item, Fill):
            draw.rectangle([0, 0, width - 1, height - 1], fill=item.color)
        elif isinstance(item, Rect):
            x0, x1 = sorted((item.x0, item.x1))
            y0, y1 = sorted((item.y0, item.y1))
            draw.rectangle(
                [x0, y0, x1, y1], fill=item.fill, outline=item.outline, width=item.width
            )
        elif isinstance(item, Line):
            if len(item.points) >= 2:
                draw.line(list(item.points), fill=item.color, width=item.width, joint="curve")
        elif isinstance(item, Polygon):
            draw.polygon(
                list(item.points), fill=item.fill, outline=item.outline, width=item.width
            )
        elif isinstance(item, Circle):
            cx, cy = item.center
            r = item.radius
            draw.ellipse(
                [cx - r, cy - r, cx + r, cy + r],
                fill=item.fill,
                outline=item.outline,
                width=item.width,
            )
        elif isinstance(item, Text):
            if item.text:
                _draw_text(canvas, draw, item, resolver.font(item.size))
        elif isinstance(item, Blit):
            _blit(canvas, item)
        else:
            raise RenderError(f"unknown drawing instruction {type(item).__name__}")
    logger.trace("Rasterized {} instructions onto {}x{}", len(instructions), width, height)
    return canvas


__all__ = [
    "Blit",
    "Circle",
    "Fill",
    "Instruction",
    "Line",
    "Point",
    "Polygon",
    "Rect",
    "Text",
    "rasterize",
]
