"""Bitmap files on disk.

Each rendered chart is written as an uncompressed 24-bit BMP named after
its position in the configuration: ``01.bmp``, ``02.bmp`` and so on.
Repeated runs overwrite the same files.  Pillow's BMP encoder writes no
timestamps or other varying metadata, so equal canvases give equal bytes.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger
from PIL import Image

from ..errors import SinkError


def bitmap_name(index: int) -> str:
    """File name of the chart at zero-based ``index``."""
    return f"{index + 1:02}.bmp"


def encode_bitmap(canvas: Image.Image) -> bytes:
    """Encode ``canvas`` as a 24-bit BMP."""
    buffer = io.BytesIO()
    canvas.convert("RGB").save(buffer, format="BMP")
    return buffer.getvalue()


class FileSink:
    """Write charts into ``directory``.

    When ``resolution`` is given, canvases of any other size are rejected
    so that one run never mixes screen sizes.
    """

    def __init__(self, directory: Path, resolution: Optional[Tuple[int, int]] = None) -> None:
        self.directory = Path(directory)
        self.resolution = resolution

    def clear(self) -> int:
        """Remove bitmaps left by earlier runs and return how many."""
        if not self.directory.exists():
            return 0
        removed = 0
        for path in sorted(self.directory.glob("*.bmp")):
            try:
                path.unlink()
            except OSError as exc:
                raise SinkError(f"cannot remove {path}: {exc}") from exc
            removed += 1
        logger.debug("Removed {} old bitmap(s) from {}", removed, self.directory)
        return removed

    def write(self, canvas: Image.Image, index: int) -> Path:
        if self.resolution is not None and canvas.size != tuple(self.resolution):
            raise SinkError(
                f"canvas is {canvas.size[0]}x{canvas.size[1]}, "
                f"expected {self.resolution[0]}x{self.resolution[1]}"
            )
        path = self.directory / bitmap_name(index)
        data = encode_bitmap(canvas)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise SinkError(f"cannot write {path}: {exc}") from exc
        logger.info("Saved chart {} to {}", index + 1, path)
        return path


__all__ = ["FileSink", "bitmap_name", "encode_bitmap"]
