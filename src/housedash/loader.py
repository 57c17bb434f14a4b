"""Loading the dashboard configuration.

The configuration is a single JSON document::

    {
      "style": {"system_palette": "Dark", "resolution": [320, 240]},
      "regions": [{"name": "kitchen", "coordinates": [[0, 0], [1, 0], [1, 1]]}],
      "charts": [{"kind": "Trend", "title": "Temperature"}]
    }

Every problem found here is a :class:`ConfigError`, raised before any
chart task starts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .charts.models import ChartSpec, GeographicalHeatMapSpec, Region
from .errors import ConfigError
from .style.models import Style


class DashboardConfig(BaseModel):
    """Style, ordered charts and the region list shared by geographical maps."""

    model_config = ConfigDict(frozen=True)

    style: Style = Field(default_factory=Style)
    charts: List[ChartSpec] = Field(default_factory=list)
    regions: Optional[List[Region]] = None


def _with_shared_regions(config: DashboardConfig) -> DashboardConfig:
    charts = []
    for index, spec in enumerate(config.charts):
        if isinstance(spec, GeographicalHeatMapSpec) and not spec.regions:
            if not config.regions:
                raise ConfigError(
                    f"chart {index + 1} ('{spec.title}') has no regions "
                    "and the configuration defines none"
                )
            spec = spec.model_copy(update={"regions": list(config.regions)})
        charts.append(spec)
    return config.model_copy(update={"charts": charts})


def _resolve_font(config: DashboardConfig, base: Path) -> DashboardConfig:
    font_path = config.style.font_path
    if font_path is None:
        return config
    if not font_path.is_absolute():
        font_path = base / font_path
    if not font_path.is_file():
        raise ConfigError(f"font file {font_path} does not exist")
    style = config.style.model_copy(update={"font_path": font_path})
    return config.model_copy(update={"style": style})


def parse_config(payload: Union[str, bytes, dict], base: Optional[Path] = None) -> DashboardConfig:
    """Validate a configuration document.

    Relative font paths are resolved against ``base`` (the current
    directory when omitted).
    """
    try:
        if isinstance(payload, dict):
            config = DashboardConfig.model_validate(payload)
        else:
            config = DashboardConfig.model_validate_json(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
    config = _with_shared_regions(config)
    config = _resolve_font(config, base or Path.cwd())
    logger.debug(
        "Configuration: {} chart(s), {} shared region(s), {}x{} {}",
        len(config.charts),
        len(config.regions or []),
        config.style.width,
        config.style.height,
        config.style.system_palette.value,
    )
    return config


def load_config(path: Path) -> DashboardConfig:
    """Read and validate the configuration file at ``path``."""
    path = Path(path)
    logger.info("Loading configuration from {}", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read configuration {path}: {exc}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"configuration {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"configuration {path} must contain a JSON object")
    return parse_config(payload, base=path.parent)


__all__ = ["DashboardConfig", "load_config", "parse_config"]
