"""Tests for the infrastructure and Proxmox summary tables."""

from __future__ import annotations

from datetime import datetime, timezone

from housedash.charts import dispatch
from housedash.charts.canvas import Circle, Rect, Text
from housedash.charts.models import InfrastructureSummarySpec, ProxmoxSummarySpec
from housedash.charts.summary import (
    INFRASTRUCTURE_GEOMETRY,
    layout_infrastructure,
    layout_proxmox,
    short_hostname,
)
from housedash.colormap import NAMED_COLORMAPS
from housedash.series.models import HostStatus
from housedash.style import Style, StyleResolver

GREEN, _, RED = NAMED_COLORMAPS["Status"]

HOSTS = [
    HostStatus(host="web.lan", online=True, load=0.5),
    HostStatus(host="db.lan", online=False),
    HostStatus(host="nas.lan", online=True, load=2.0),
]


def _texts(instructions):
    return [i.text for i in instructions if isinstance(i, Text)]


def test_short_hostname() -> None:
    assert short_hostname("nas.lan", ".lan") == "nas"
    assert short_hostname("nas.lan", None) == "nas.lan"
    assert short_hostname("nas.home", ".lan") == "nas.home"


def test_infrastructure_rows_are_sorted_and_stripped(light_style: Style, now) -> None:
    spec = InfrastructureSummarySpec(title="Servers", suffix=".lan")
    instructions = layout_infrastructure(spec, StyleResolver(light_style), HOSTS, now)
    texts = _texts(instructions)
    assert texts[:4] == ["Servers", "HOST", "STATUS", "LOAD"]
    assert texts[4:] == ["db", "nas", "web"]


def test_status_dots_and_load_bars(light_style: Style, now) -> None:
    """Offline hosts get a red dot and no load bar."""
    spec = InfrastructureSummarySpec(title="Servers")
    instructions = layout_infrastructure(spec, StyleResolver(light_style), HOSTS, now)
    dots = [i for i in instructions if isinstance(i, Circle)]
    assert [d.fill for d in dots] == [RED, GREEN, GREEN]
    assert all(d.radius == INFRASTRUCTURE_GEOMETRY.dot_radius for d in dots)
    assert all(d.outline is not None for d in dots)

    outlines = [i for i in instructions if isinstance(i, Rect) and i.fill is None]
    steps = [i for i in instructions if isinstance(i, Rect) and i.fill is not None]
    assert len(outlines) == 2
    # nas is clamped to a full bar, web fills half of it.
    assert len(steps) == 61 + 30
    assert steps[0].fill == GREEN


def test_footer_uses_style_timezone(now) -> None:
    style = Style(timezone="Europe/Rome")
    spec = InfrastructureSummarySpec(title="Servers", last_update_format="%H:%M")
    instructions = layout_infrastructure(spec, StyleResolver(style), [], now)
    footer = instructions[-1]
    assert isinstance(footer, Text)
    assert footer.text == "01:00"
    assert footer.anchor == "rb"


def test_proxmox_summary_uses_small_dots_with_ring(dark_style: Style, now) -> None:
    spec = ProxmoxSummarySpec(title="VMs", node_fqdn="pve.lan", suffix=".lan")
    instructions = layout_proxmox(spec, StyleResolver(dark_style), HOSTS, now)
    circles = [i for i in instructions if isinstance(i, Circle)]
    assert [c.radius for c in circles] == [2, 3] * 3
    assert circles[1].outline == (192, 192, 192)
    bars = [i for i in instructions if isinstance(i, Rect) and i.fill is None]
    assert all(b.y1 - b.y0 == 5 for b in bars)


def test_summary_renders_on_wider_screens(now) -> None:
    style = Style(resolution=(480, 320))
    spec = InfrastructureSummarySpec(title="Servers")
    canvas = dispatch.render(spec, StyleResolver(style), HOSTS, datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert canvas.size == (480, 320)
    assert canvas.getpixel((479, 319)) == (255, 255, 255)
