"""Data source replaying a JSON snapshot.

A snapshot stands in for the time-series database and the host
monitoring API.  It is keyed by chart title::

    {
      "series": {"Temperature": {"kitchen": [["2024-01-01T00:00:00Z", 20.5], ...]}},
      "hosts": {"Servers": [{"host": "nas.lan", "online": true, "load": 0.2}]}
    }

Image charts read the file named by their ``path``, resolved against the
directory holding the snapshot.  The snapshot is re-read on every query
so that each run, and each retry, sees the current file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from ..charts.models import ImageSpec, InfrastructureSummarySpec, ProxmoxSummarySpec
from ..errors import DataFetchError, RenderError
from ..series.models import HostStatus, Series, TimeWindow
from .base import QueryResult


class SnapshotDataSource:
    """Answer chart queries from a snapshot file.

    Parameters
    ----------
    path : Path
        The JSON snapshot.  A file that cannot be read or parsed raises
        :class:`DataFetchError`, so the query is retried; content of the
        wrong shape raises :class:`RenderError`, which is not.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataFetchError(f"cannot read snapshot {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise RenderError(f"snapshot {self.path} must contain a JSON object")
        return payload

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._load().get(name, {})
        if not isinstance(section, dict):
            raise RenderError(f"snapshot section '{name}' must be a JSON object")
        return section

    def _series(self, title: str, window: Optional[TimeWindow]) -> Dict[str, Series]:
        tags = self._section("series").get(title)
        if tags is None:
            logger.warning("Snapshot has no series for chart '{}'", title)
            return {}
        if not isinstance(tags, dict):
            raise RenderError(f"series for chart '{title}' must map tags to samples")
        try:
            result = {tag: Series(tag=tag, samples=rows) for tag, rows in tags.items()}
        except ValidationError as exc:
            raise RenderError(f"invalid series for chart '{title}': {exc}") from exc
        if window is not None:
            result = {
                tag: Series(
                    tag=tag, samples=[s for s in series.samples if window.contains(s[0])]
                )
                for tag, series in result.items()
            }
        logger.debug("Loaded {} tag(s) for chart '{}'", len(result), title)
        return result

    def _hosts(self, title: str) -> List[HostStatus]:
        rows = self._section("hosts").get(title)
        if rows is None:
            logger.warning("Snapshot has no hosts for chart '{}'", title)
            return []
        try:
            return [HostStatus.model_validate(row) for row in rows]
        except (ValidationError, TypeError) as exc:
            raise RenderError(f"invalid hosts for chart '{title}': {exc}") from exc

    def _image(self, spec: ImageSpec) -> bytes:
        path = spec.path if spec.path.is_absolute() else self.path.parent / spec.path
        try:
            return path.read_bytes()
        except OSError as exc:
            raise DataFetchError(f"cannot read image {path}: {exc}") from exc

    def query(self, spec, window: Optional[TimeWindow]) -> QueryResult:
        if isinstance(spec, ImageSpec):
            return self._image(spec)
        if isinstance(spec, (InfrastructureSummarySpec, ProxmoxSummarySpec)):
            return self._hosts(spec.title)
        return self._series(spec.title, window)


__all__ = ["SnapshotDataSource"]
