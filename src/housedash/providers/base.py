"""Collaborator contracts consumed by the rendering engine.

The engine never talks to a database or decodes files itself.  A
:class:`DataSource` answers one query per chart and an
:class:`ImageDecoder` turns encoded picture bytes into pixels.  Both are
protocols so that tests can pass small fakes without real I/O.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Union

import numpy as np

from ..series.models import HostStatus, Series, TimeWindow

# What a data source returns, depending on the chart kind: tagged series
# for trends and heat maps, host statuses for the summaries and raw bytes
# for image charts.
QueryResult = Union[Dict[str, Series], List[HostStatus], bytes]


class DataSource(Protocol):
    """Protocol for chart data providers.

    ``query`` receives the chart configuration and the window computed
    from the render time (``None`` for charts without a lookback).  It
    must raise :class:`housedash.errors.DataFetchError` on transient
    failures so that the orchestrator can retry.
    """

    def query(self, spec, window: Optional[TimeWindow]) -> QueryResult:
        raise NotImplementedError


class ImageDecoder(Protocol):
    """Protocol for image decoders.

    ``decode`` returns an ``(height, width, 4)`` array of ``uint8`` RGBA
    pixels and raises :class:`housedash.errors.RenderError` for data it
    cannot decode.
    """

    def decode(self, data: bytes) -> np.ndarray:
        raise NotImplementedError


__all__ = ["DataSource", "ImageDecoder", "QueryResult"]
