"""Data sources and decoders feeding the chart layouts."""

from .base import DataSource, ImageDecoder, QueryResult
from .images import PillowImageDecoder
from .snapshot import SnapshotDataSource

__all__ = [
    "DataSource",
    "ImageDecoder",
    "PillowImageDecoder",
    "QueryResult",
    "SnapshotDataSource",
]
