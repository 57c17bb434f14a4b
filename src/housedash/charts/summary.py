"""Host summary tables: infrastructure and Proxmox summaries.

Both charts list one host per row, sorted by name, under a ``HOST /
STATUS / LOAD`` header.  Column positions are laid out for a 320 pixel
wide screen and stretched proportionally on other widths.  The status
dot and the load bar use the ``Status`` colormap over [0, MAX_LOAD].
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from loguru import logger

from ..colormap import ColorMap, blend, build_colormap, color_for
from ..config import LABEL_FONT_SIZE
from ..series.models import HostStatus
from ..style.resolver import StyleResolver
from . import elements
from .canvas import Circle, Fill, Instruction, Line, Text
from .models import InfrastructureSummarySpec, ProxmoxSummarySpec

HOST_NAME_X = 15
HOST_X = 50
STATUS_X = 220
LOAD_X = 280
MAX_LOAD = 1.0
REFERENCE_WIDTH = 320


@dataclass(frozen=True)
class SummaryGeometry:
    """Sizes that differ between the two summary kinds."""

    header_height: int
    underline_y: int
    dot_radius: int
    ring_radius: Optional[int]
    bar_size: tuple


INFRASTRUCTURE_GEOMETRY = SummaryGeometry(
    header_height=32, underline_y=17, dot_radius=7, ring_radius=None, bar_size=(40, 10)
)
PROXMOX_GEOMETRY = SummaryGeometry(
    header_height=35, underline_y=19, dot_radius=2, ring_radius=3, bar_size=(40, 5)
)


def short_hostname(host: str, suffix: Optional[str]) -> str:
    if suffix and host.endswith(suffix):
        return host[: -len(suffix)]
    return host


def _header(resolver: StyleResolver, top: int, geometry: SummaryGeometry) -> List[Instruction]:
    scale_x = resolver.width / REFERENCE_WIDTH
    foreground = resolver.foreground_color()
    instructions: List[Instruction] = []
    for text, x in (("HOST", HOST_X), ("STATUS", STATUS_X), ("LOAD", LOAD_X)):
        x = x * scale_x
        half_width = resolver.text_size(text, LABEL_FONT_SIZE)[0] / 2
        y = top + geometry.underline_y
        instructions.append(Text((x, top + 10), text, foreground, LABEL_FONT_SIZE, anchor="mt"))
        instructions.append(Line(((x - half_width - 1, y), (x + half_width - 2, y)), foreground))
    return instructions


def _status(
    resolver: StyleResolver,
    colormap: ColorMap,
    host: HostStatus,
    center: tuple,
    geometry: SummaryGeometry,
) -> List[Instruction]:
    color = color_for(0.0 if host.online else MAX_LOAD, colormap)
    if geometry.ring_radius is None:
        border = blend(color, resolver.light_foreground_color())
        return [Circle(center, geometry.dot_radius, fill=color, outline=border)]
    return [
        Circle(center, geometry.dot_radius, fill=color),
        Circle(center, geometry.ring_radius, outline=resolver.light_foreground_color()),
    ]


def summary_layout(
    title: str,
    suffix: Optional[str],
    vertical_step: int,
    resolver: StyleResolver,
    hosts: Sequence[HostStatus],
    geometry: SummaryGeometry,
) -> List[Instruction]:
    """Shared layout of both summary kinds, without footer."""
    instructions: List[Instruction] = [Fill(resolver.background_color())]
    title_instructions, title_height = elements.title(resolver, title)
    instructions.extend(title_instructions)
    instructions.extend(_header(resolver, title_height, geometry))

    colormap = build_colormap("Status", (0.0, MAX_LOAD))
    scale_x = resolver.width / REFERENCE_WIDTH
    for i, host in enumerate(sorted(hosts, key=lambda h: h.host)):
        logger.debug(
            "Processing host {} ({}, online: {}, relative load: {})",
            i + 1,
            host.host,
            host.online,
            host.load,
        )
        cy = title_height + geometry.header_height + vertical_step * i
        if cy > resolver.height:
            logger.warning("Host {} does not fit on the screen", host.host)
        instructions.append(
            Text(
                (HOST_NAME_X, cy),
                short_hostname(host.host, suffix),
                resolver.foreground_color(),
                LABEL_FONT_SIZE,
                anchor="lm",
            )
        )
        instructions.extend(_status(resolver, colormap, host, (STATUS_X * scale_x, cy), geometry))
        if host.online:
            instructions.extend(
                elements.load_bar(
                    resolver,
                    colormap,
                    (int(LOAD_X * scale_x), cy),
                    geometry.bar_size,
                    host.load or 0.0,
                    MAX_LOAD,
                )
            )
    return instructions


def layout_infrastructure(
    spec: InfrastructureSummarySpec,
    resolver: StyleResolver,
    data: Sequence[HostStatus],
    now: datetime,
) -> List[Instruction]:
    """Infrastructure summary with an optional "last updated" footer."""
    logger.info("Drawing infrastructure summary '{}'", spec.title.lower())
    instructions = summary_layout(
        spec.title, spec.suffix, spec.vertical_step, resolver, data, INFRASTRUCTURE_GEOMETRY
    )
    if spec.last_update_format:
        stamp = now.astimezone(resolver.style.zone()).strftime(spec.last_update_format)
        instructions.append(
            Text(
                (resolver.width - 10, resolver.height),
                stamp,
                resolver.foreground_color(),
                LABEL_FONT_SIZE,
                anchor="rb",
            )
        )
    return instructions


def layout_proxmox(
    spec: ProxmoxSummarySpec,
    resolver: StyleResolver,
    data: Sequence[HostStatus],
    now: datetime,
) -> List[Instruction]:
    logger.info("Drawing Proxmox summary '{}' for {}", spec.title.lower(), spec.node_fqdn)
    return summary_layout(
        spec.title, spec.suffix, spec.vertical_step, resolver, data, PROXMOX_GEOMETRY
    )


__all__ = [
    "INFRASTRUCTURE_GEOMETRY",
    "PROXMOX_GEOMETRY",
    "SummaryGeometry",
    "layout_infrastructure",
    "layout_proxmox",
    "short_hostname",
    "summary_layout",
]
