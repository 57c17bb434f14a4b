"""Image charts: a static picture covering the whole screen."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple, Union

import numpy as np
from loguru import logger

from ..errors import RenderError
from ..providers.base import ImageDecoder
from ..providers.images import PillowImageDecoder
from ..style.resolver import StyleResolver
from .canvas import Blit, Fill, Instruction
from .models import ImageSpec


def cover_box(
    image_size: Tuple[int, int], canvas_size: Tuple[int, int]
) -> Tuple[int, int, int, int]:
    """Centered crop of ``image_size`` with the aspect ratio of the canvas.

    Scaling the crop to the canvas fills it entirely; the excess of the
    image along one axis is cut evenly on both sides.
    """
    width, height = image_size
    canvas_width, canvas_height = canvas_size
    if width <= 0 or height <= 0:
        raise RenderError(f"cannot scale an empty {width}x{height} image")
    if canvas_width <= 0 or canvas_height <= 0:
        raise RenderError(f"zero-area canvas {canvas_width}x{canvas_height}")
    scale = max(canvas_width / width, canvas_height / height)
    crop_width = min(width, round(canvas_width / scale))
    crop_height = min(height, round(canvas_height / scale))
    left = (width - crop_width) // 2
    top = (height - crop_height) // 2
    return left, top, left + crop_width, top + crop_height


def layout(
    spec: ImageSpec,
    resolver: StyleResolver,
    data: Union[bytes, np.ndarray],
    now: datetime,
    decoder: Optional[ImageDecoder] = None,
) -> List[Instruction]:
    """Lay out ``data`` scaled to cover the canvas.

    ``data`` is either encoded bytes, decoded with ``decoder`` (Pillow by
    default), or an already decoded RGBA array.  Transparent parts show
    the background color.
    """
    logger.info("Drawing image '{}'", spec.path)
    if isinstance(data, (bytes, bytearray)):
        pixels = (decoder or PillowImageDecoder()).decode(bytes(data))
    else:
        pixels = np.asarray(data)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise RenderError(f"expected an RGBA bitmap, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    box = cover_box((width, height), (resolver.width, resolver.height))
    logger.debug("Cropping {}x{} image to {}", width, height, box)
    return [
        Fill(resolver.background_color()),
        Blit(pixels, box, (resolver.width, resolver.height)),
    ]


__all__ = ["cover_box", "layout"]
