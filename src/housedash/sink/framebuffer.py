"""Raw frames for a Linux framebuffer device.

The framebuffer expects packed pixels whose channel widths and bit
positions depend on the display.  :class:`FramebufferGeometry` carries
the values a driver reports in its screen info.  Each 8-bit channel is
reduced to its width by ``value * 2**length // 256`` and shifted to its
offset; the pixel is stored little-endian, one row every
``line_length`` bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from loguru import logger
from PIL import Image

from ..errors import SinkError


@dataclass(frozen=True)
class FramebufferGeometry:
    """Pixel layout of a framebuffer.

    ``line_length`` is the row stride in bytes; ``None`` means rows are
    packed without padding.
    """

    bits_per_pixel: int
    red_length: int
    red_offset: int
    green_length: int
    green_offset: int
    blue_length: int
    blue_offset: int
    line_length: Optional[int] = None

    @classmethod
    def rgb565(cls, line_length: Optional[int] = None) -> "FramebufferGeometry":
        return cls(16, 5, 11, 6, 5, 5, 0, line_length)

    @classmethod
    def xrgb8888(cls, line_length: Optional[int] = None) -> "FramebufferGeometry":
        return cls(32, 8, 16, 8, 8, 8, 0, line_length)

    @property
    def bytes_per_pixel(self) -> int:
        return self.bits_per_pixel // 8

    def stride(self, width: int) -> int:
        return self.line_length if self.line_length is not None else width * self.bytes_per_pixel


GEOMETRIES = {
    "rgb565": FramebufferGeometry.rgb565(),
    "xrgb8888": FramebufferGeometry.xrgb8888(),
}


def pack_pixels(canvas: Image.Image, geometry: FramebufferGeometry) -> bytes:
    """Return the raw frame of ``canvas`` for ``geometry``."""
    if geometry.bits_per_pixel % 8 or not 8 <= geometry.bits_per_pixel <= 32:
        raise SinkError(f"unsupported framebuffer depth {geometry.bits_per_pixel}")
    rgb = np.asarray(canvas.convert("RGB"), dtype=np.uint32)
    height, width = rgb.shape[:2]
    bpp = geometry.bytes_per_pixel
    stride = geometry.stride(width)
    if stride < width * bpp:
        raise SinkError(f"line length {stride} is too short for {width} pixels")

    packed = np.zeros((height, width), dtype=np.uint32)
    channels = (
        (geometry.red_length, geometry.red_offset),
        (geometry.green_length, geometry.green_offset),
        (geometry.blue_length, geometry.blue_offset),
    )
    for i, (length, offset) in enumerate(channels):
        packed |= ((rgb[..., i] * (1 << length)) // 256) << offset

    frame = np.zeros((height, stride), dtype=np.uint8)
    for byte in range(bpp):
        frame[:, byte : width * bpp : bpp] = ((packed >> (8 * byte)) & 0xFF).astype(np.uint8)
    return frame.tobytes()


class FramebufferSink:
    """Write each chart as a raw frame to ``device``.

    Every write replaces the whole frame, so the screen shows the last
    chart written.
    """

    def __init__(self, device: Path, geometry: Optional[FramebufferGeometry] = None) -> None:
        self.device = Path(device)
        self.geometry = geometry or FramebufferGeometry.rgb565()

    def write(self, canvas: Image.Image, index: int) -> Path:
        frame = pack_pixels(canvas, self.geometry)
        logger.debug(
            "Writing {} bytes ({} bpp) for chart {} to {}",
            len(frame),
            self.geometry.bits_per_pixel,
            index + 1,
            self.device,
        )
        try:
            with self.device.open("wb") as fh:
                fh.write(frame)
        except OSError as exc:
            raise SinkError(f"cannot write framebuffer {self.device}: {exc}") from exc
        logger.info("Displayed chart {} on {}", index + 1, self.device)
        return self.device


__all__ = ["FramebufferGeometry", "FramebufferSink", "GEOMETRIES", "pack_pixels"]
