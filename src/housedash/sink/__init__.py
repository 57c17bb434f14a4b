"""Destinations for rendered charts."""

from .bitmap import FileSink, bitmap_name, encode_bitmap
from .framebuffer import GEOMETRIES, FramebufferGeometry, FramebufferSink, pack_pixels

__all__ = [
    "FileSink",
    "FramebufferGeometry",
    "FramebufferSink",
    "GEOMETRIES",
    "bitmap_name",
    "encode_bitmap",
    "pack_pixels",
]
