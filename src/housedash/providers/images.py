"""Pillow-backed image decoder."""

from __future__ import annotations

import io

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from ..errors import RenderError


class PillowImageDecoder:
    """Decode any format Pillow understands into RGBA pixels."""

    def decode(self, data: bytes) -> np.ndarray:
        if not data:
            raise RenderError("cannot decode an empty image")
        try:
            with Image.open(io.BytesIO(data)) as image:
                logger.debug("Decoding {} image of {}x{}", image.format, image.width, image.height)
                rgba = image.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise RenderError(f"cannot decode image: {exc}") from exc
        return np.asarray(rgba, dtype=np.uint8)


__all__ = ["PillowImageDecoder"]
